from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from designs.infrastructure.db import get_db
from designs.application.service import DesignService
from designs.application.schemas import DesignPayload, DesignRead, DesignDeleted

router = APIRouter(prefix="/designs", tags=["designs"])

@router.get("", response_model=list[DesignRead])
def list_designs(db: Session = Depends(get_db)):
    """All designs, newest first."""
    return DesignService(db).list()

@router.get("/{design_id}", response_model=DesignRead)
def get_design(design_id: str, db: Session = Depends(get_db)):
    design = DesignService(db).get(design_id)
    if not design:
        raise HTTPException(status_code=404, detail="Design not found")
    return design

@router.post("", response_model=DesignRead, status_code=201)
def create_design(payload: DesignPayload, db: Session = Depends(get_db)):
    # DesignValidationError is answered with 400 by the app's exception handler
    return DesignService(db).create(payload)

@router.delete("/{design_id}", response_model=DesignDeleted)
def delete_design(design_id: str, db: Session = Depends(get_db)):
    if not DesignService(db).delete(design_id):
        raise HTTPException(status_code=404, detail="Design not found")
    return DesignDeleted(deleted=True)
