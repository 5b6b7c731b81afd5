"""What the gallery screen shows: one card per design plus a zoom overlay."""
from dataclasses import dataclass, field
from typing import Optional

from designs.application.schemas import DesignRead


@dataclass(frozen=True)
class Thumbnail:
    index: int
    src: str


@dataclass
class DesignCard:
    design_id: str
    name: str
    type_badge: Optional[str]
    thumbnails: list[Thumbnail] = field(default_factory=list)
    error: Optional[str] = None
    deleting: bool = False


def build_card(record: DesignRead) -> DesignCard:
    return DesignCard(
        design_id=record.id,
        name=record.name,
        type_badge=record.type.strip() or None,
        thumbnails=[Thumbnail(i, src) for i, src in enumerate(record.images)],
    )


class ZoomViewer:
    """Full-size view of a single image.

    Closed by the close control or by a click anywhere outside the image.
    """

    def __init__(self):
        self.image: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.image is not None

    def open(self, image: str) -> None:
        self.image = image

    def close(self) -> None:
        self.image = None

    def click(self, inside_image: bool) -> None:
        if not inside_image:
            self.close()
