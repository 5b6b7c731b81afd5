from typing import Any, Callable, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from shared.core import generate_id, get_logger
from designs.domain.models import Design
from .schemas import DesignPayload, NewDesign, MAX_IMAGES

logger = get_logger(__name__, component="design-store")

DESIGN_ID_PREFIX = "D"
# Insert attempts before giving up on a colliding id
ID_ATTEMPTS = 5

NAME_REQUIRED = "name required"
IMAGES_REQUIRED = "Add at least one image"


class DesignValidationError(Exception):
    """Create input rejected; nothing was written."""


def _clean_images(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [img for img in raw if isinstance(img, str)][:MAX_IMAGES]


def sanitize_design_input(payload: DesignPayload) -> NewDesign:
    """
    Turn a raw create body into a NewDesign or raise DesignValidationError.

    The name is checked before the images, so a blank name is reported even
    when the images are also unusable.
    """
    name = payload.name.strip() if isinstance(payload.name, str) else ""
    if not name:
        raise DesignValidationError(NAME_REQUIRED)

    images = _clean_images(payload.images)
    if not images:
        raise DesignValidationError(IMAGES_REQUIRED)

    design_type = payload.type.strip() if isinstance(payload.type, str) else ""
    return NewDesign(name=name, type=design_type, images=images)


class DesignService:
    def __init__(self, db: Session, id_factory: Optional[Callable[[], str]] = None):
        self.db = db
        self._id_factory = id_factory or (lambda: generate_id(DESIGN_ID_PREFIX))

    def list(self) -> list[Design]:
        """All designs, newest first."""
        return (
            self.db.query(Design)
            .order_by(Design.created_at.desc(), Design.pk.desc())
            .all()
        )

    def get(self, design_id: str) -> Optional[Design]:
        return self.db.query(Design).filter(Design.design_id == design_id).first()

    def create(self, payload: DesignPayload) -> Design:
        data = sanitize_design_input(payload)

        for attempt in range(1, ID_ATTEMPTS + 1):
            obj = Design(
                design_id=self._id_factory(),
                name=data.name,
                type=data.type,
                images=list(data.images),
            )
            self.db.add(obj)
            try:
                self.db.commit()
            except IntegrityError:
                # Unique design_id constraint; retry with a fresh id
                self.db.rollback()
                if attempt == ID_ATTEMPTS:
                    logger.error(
                        "Design id collisions exhausted",
                        extra={'extra_fields': {'attempts': attempt}}
                    )
                    raise
                logger.warning(
                    "Design id collision, retrying",
                    extra={'extra_fields': {'design_id': obj.design_id, 'attempt': attempt}}
                )
                continue
            self.db.refresh(obj)
            logger.info(
                "Design created",
                extra={'extra_fields': {'design_id': obj.design_id, 'image_count': len(obj.images)}}
            )
            return obj

    def delete(self, design_id: str) -> bool:
        deleted = (
            self.db.query(Design)
            .filter(Design.design_id == design_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("Design deleted", extra={'extra_fields': {'design_id': design_id}})
        return deleted > 0
