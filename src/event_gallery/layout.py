"""Masonry grid placement derived from a photo's position."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from event_gallery.models import Photo

PATTERN_PERIOD = 10
TALL_POSITIONS = frozenset({0, 6})
WIDE_POSITIONS = frozenset({3, 8})


class LayoutHint(str, Enum):
    NORMAL = "normal"
    TALL = "tall"
    WIDE = "wide"


# CSS grid placement for each hint
GRID_PLACEMENT: dict[LayoutHint, dict[str, str]] = {
    LayoutHint.NORMAL: {},
    LayoutHint.TALL: {"grid-row": "span 2"},
    LayoutHint.WIDE: {"grid-column": "span 2"},
}


@dataclass(frozen=True)
class GridCell:
    """A photo placed in the masonry grid."""

    index: int
    photo: Photo
    hint: LayoutHint

    @property
    def placement(self) -> dict[str, str]:
        return GRID_PLACEMENT[self.hint]


def layout_hint(index: int) -> LayoutHint:
    """Get the cell shape for the photo at ``index``.

    The pattern repeats every ten positions and depends on nothing but the
    position, so a given sequence always lays out the same way.

    Raises:
        ValueError: If index is negative
    """
    if index < 0:
        raise ValueError(f"Index must be non-negative, got {index}")

    position = index % PATTERN_PERIOD
    if position in TALL_POSITIONS:
        return LayoutHint.TALL
    if position in WIDE_POSITIONS:
        return LayoutHint.WIDE
    return LayoutHint.NORMAL


def layout_grid(photos: Sequence[Photo]) -> list[GridCell]:
    return [
        GridCell(index=index, photo=photo, hint=layout_hint(index))
        for index, photo in enumerate(photos)
    ]
