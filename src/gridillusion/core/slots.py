"""Quadrant tags and the nine-slot assignment model.

A grid run needs nine inputs: one ``main`` image that is split into
quadrants, plus a header and a footer strip for each quadrant.  Callers
either name every slot explicitly (a :data:`SlotAssignment`) or pass nine
references in the positional order given by :data:`SLOT_NAMES`:

====  ===========
0     main
1-4   header-tl, header-tr, header-bl, header-br
5-8   footer-tl, footer-tr, footer-bl, footer-br
====  ===========
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum

from gridillusion.core.errors import NotFound


class QuadrantTag(str, Enum):
    """Position of a quadrant in the 2x2 grid."""

    TL = "tl"
    TR = "tr"
    BL = "bl"
    BR = "br"


QUADRANT_ORDER: tuple[QuadrantTag, ...] = (
    QuadrantTag.TL,
    QuadrantTag.TR,
    QuadrantTag.BL,
    QuadrantTag.BR,
)

MAIN_SLOT = "main"


def header_slot(tag: QuadrantTag) -> str:
    return f"header-{tag.value}"


def footer_slot(tag: QuadrantTag) -> str:
    return f"footer-{tag.value}"


SLOT_NAMES: tuple[str, ...] = (
    MAIN_SLOT,
    *(header_slot(tag) for tag in QUADRANT_ORDER),
    *(footer_slot(tag) for tag in QUADRANT_ORDER),
)

# Slot name -> input reference (blob key, path, or any resolver-specific handle).
SlotAssignment = Mapping[str, str]


def missing_slots(assignment: SlotAssignment) -> list[str]:
    """Return the required slots that are absent or empty, in canonical order."""
    return [name for name in SLOT_NAMES if not assignment.get(name)]


def validate_assignment(assignment: SlotAssignment) -> dict[str, str]:
    """Check that every slot is filled and return a plain dict of the nine slots.

    Unknown extra keys are ignored.

    Raises:
        NotFound: If any required slot is missing or empty.
    """
    missing = missing_slots(assignment)
    if missing:
        raise NotFound(f"Slot assignment is incomplete, missing: {', '.join(missing)}")
    return {name: assignment[name] for name in SLOT_NAMES}


def assignment_from_sequence(refs: Sequence[str]) -> dict[str, str]:
    """Map nine positional references onto slot names.

    Raises:
        NotFound: If fewer than nine references are given.
        ValueError: If more than nine references are given.
    """
    if len(refs) < len(SLOT_NAMES):
        raise NotFound(f"Expected {len(SLOT_NAMES)} input images, got {len(refs)}")
    if len(refs) > len(SLOT_NAMES):
        raise ValueError(f"Expected {len(SLOT_NAMES)} input images, got {len(refs)}")
    return dict(zip(SLOT_NAMES, refs))
