"""
Design gallery screen controller.

Owns the "add design" form (name, type, three photo slots), runs the
normalizer for each selected photo, and sequences create/list/delete calls
against the gallery service. All work happens on one asyncio event loop;
results of earlier sessions or superseded photo selections are dropped.
"""
import asyncio
import inspect
import itertools
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from designs.application.schemas import DesignRead
from .api import GalleryApi, GalleryApiError
from .normalizer import ImageDecodeError, NormalizedImage, is_image_media_type, normalize_image
from .slots import SLOT_COUNT, FormSession, PendingPhoto
from .view import DesignCard, ZoomViewer, build_card

logger = logging.getLogger(__name__)

PHOTO_ERROR = "Could not process image. Try another photo."
NOT_AN_IMAGE = "Choose an image file."
NAME_MISSING = "Enter a design name"
IMAGES_MISSING = "Add at least one image"

Normalizer = Callable[[bytes], Awaitable[NormalizedImage]]
Confirm = Callable[[DesignCard], Union[bool, Awaitable[bool]]]


class FormPhase(str, Enum):
    CLOSED = "closed"
    OPEN_EMPTY = "open_empty"
    OPEN_PARTIALLY_FILLED = "open_partially_filled"
    OPEN_FILLED = "open_filled"
    SUBMITTING = "submitting"


class FormNotOpenError(RuntimeError):
    pass


class GalleryController:
    def __init__(self, api: GalleryApi, normalizer: Normalizer = normalize_image):
        self.api = api
        self._normalize = normalizer
        self._session_tokens = itertools.count(1)
        self.session: Optional[FormSession] = None
        self._submitting: Optional[FormSession] = None
        self.form_error: Optional[str] = None

        self.cards: list[DesignCard] = []
        self.loading = False
        self.list_error: Optional[str] = None
        self.zoom = ZoomViewer()

    # form state

    @property
    def phase(self) -> FormPhase:
        if self.session is None:
            return FormPhase.CLOSED
        if self._submitting is self.session:
            return FormPhase.SUBMITTING
        filled = self.session.filled_count
        if filled == 0:
            return FormPhase.OPEN_EMPTY
        if filled < SLOT_COUNT:
            return FormPhase.OPEN_PARTIALLY_FILLED
        return FormPhase.OPEN_FILLED

    @property
    def submittable(self) -> bool:
        return (
            self.phase not in (FormPhase.CLOSED, FormPhase.SUBMITTING)
            and bool(self.session.name.strip())
            and self.session.filled_count > 0
        )

    def _editable_session(self) -> FormSession:
        if self.session is None:
            raise FormNotOpenError("the add design form is not open")
        if self._submitting is self.session:
            raise FormNotOpenError("the add design form is being submitted")
        return self.session

    def open_form(self) -> FormSession:
        """Start a fresh session; anything still in flight for an older one is ignored."""
        self.session = FormSession(next(self._session_tokens))
        self.form_error = None
        return self.session

    def cancel_form(self) -> None:
        self.session = None
        self.form_error = None

    def set_name(self, value: str) -> None:
        self._editable_session().name = value

    def set_type(self, value: str) -> None:
        self._editable_session().type = value

    # photos

    async def select_photo(self, slot: int, data: bytes, media_type: Optional[str],
                           source: str = "choose") -> bool:
        """Normalize a photo into a slot. Returns True when the slot was written."""
        session = self._editable_session()
        if not is_image_media_type(media_type):
            session.reject(slot, NOT_AN_IMAGE)
            return False

        pending = session.begin(slot, source)
        try:
            result = await self._normalize(data)
        except ImageDecodeError as e:
            logger.info("Photo for slot %d rejected: %s", slot, e)
            return self._apply(pending, error=PHOTO_ERROR)
        return self._apply(pending, image=result.data_url)

    async def select_photo_file(self, slot: int, path: Union[str, Path], source: str = "choose") -> bool:
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        data = await asyncio.to_thread(path.read_bytes)
        return await self.select_photo(slot, data, media_type, source)

    def _apply(self, pending: PendingPhoto, image: Optional[str] = None,
               error: Optional[str] = None) -> bool:
        session = self.session
        if session is None or session.token != pending.session:
            logger.debug("Dropping photo result of closed session %d", pending.session)
            return False
        applied = session.fill(pending, image) if image is not None else session.fail(pending, error)
        if not applied:
            logger.debug("Dropping superseded photo result for slot %d", pending.slot)
        return applied

    def remove_photo(self, slot: int) -> None:
        self._editable_session().clear(slot)

    # server calls

    async def submit(self) -> Optional[DesignRead]:
        """Create the design. On failure the form stays open with its input intact."""
        session = self._editable_session()
        name = session.name.strip()
        images = session.images
        if not name:
            self.form_error = NAME_MISSING
            return None
        if not images:
            self.form_error = IMAGES_MISSING
            return None

        self.form_error = None
        self._submitting = session
        try:
            record = await self.api.create_design(name, session.type.strip(), images)
        except GalleryApiError as e:
            if self.session is session:
                self.form_error = e.message
            return None
        finally:
            if self._submitting is session:
                self._submitting = None

        if self.session is session:
            self.session = None
        await self.load()
        return record

    async def load(self) -> None:
        self.loading = True
        try:
            records = await self.api.list_designs()
        except GalleryApiError as e:
            self.list_error = e.message
            return
        finally:
            self.loading = False
        self.list_error = None
        self.cards = [build_card(record) for record in records]

    def card(self, design_id: str) -> DesignCard:
        for card in self.cards:
            if card.design_id == design_id:
                return card
        raise KeyError(design_id)

    async def delete_design(self, design_id: str, confirm: Confirm) -> bool:
        card = self.card(design_id)
        answer = confirm(card)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return False

        card.error = None
        card.deleting = True
        try:
            await self.api.delete_design(design_id)
        except GalleryApiError as e:
            card.error = e.message
            return False
        finally:
            card.deleting = False
        await self.load()
        return True

    # zoom

    def open_zoom(self, design_id: str, index: int) -> None:
        self.zoom.open(self.card(design_id).thumbnails[index].src)

    def close_zoom(self) -> None:
        self.zoom.close()

    def click_overlay(self, inside_image: bool) -> None:
        self.zoom.click(inside_image)
