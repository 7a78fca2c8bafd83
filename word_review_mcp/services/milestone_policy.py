"""Nine-slot milestone grid (3 short-term, 6 long-term checkpoints)."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..models.enums import Track
from ..models.review_state import LONG_SLOT_COUNT, SHORT_SLOT_COUNT

SHORT_OFFSETS = (
    timedelta(hours=1),
    timedelta(hours=4),
    timedelta(hours=12),
)
LONG_OFFSETS = (
    timedelta(days=1),
    timedelta(days=2),
    timedelta(days=4),
    timedelta(days=7),
    timedelta(days=15),
    timedelta(days=31),
)

TOTAL_SLOTS = SHORT_SLOT_COUNT + LONG_SLOT_COUNT


@dataclass(frozen=True)
class MilestoneResult:
    """Result of toggling one milestone slot.

    next_review_at is None unless the toggle was a new completion; the caller
    keeps its stored due time in that case.
    """

    short_slots: tuple[bool, ...]
    long_slots: tuple[bool, ...]
    is_new_completion: bool
    next_review_at: datetime | None = None


def toggle(
    short_slots: tuple[bool, ...] | list[bool],
    long_slots: tuple[bool, ...] | list[bool],
    track: Track | str,
    index: int,
    now: datetime,
    ever_completed: bool = False,
) -> MilestoneResult:
    """
    Flip one milestone slot and work out the next obligation.

    Args:
        short_slots: Current short-term slots (1h, 4h, 12h)
        long_slots: Current long-term slots (1d, 2d, 4d, 7d, 15d, 31d)
        track: "short" or "long"
        index: Slot position within the track
        now: Time of the toggle
        ever_completed: Whether the word has completions in its history
            beyond the slots currently checked

    Returns:
        MilestoneResult with new slot tuples. The inputs are not modified.

    Raises:
        ValueError: If index is outside the track
    """
    track = Track(track)
    short = tuple(bool(s) for s in short_slots)
    long = tuple(bool(s) for s in long_slots)
    if len(short) != SHORT_SLOT_COUNT or len(long) != LONG_SLOT_COUNT:
        raise ValueError(
            f"Expected {SHORT_SLOT_COUNT} short and {LONG_SLOT_COUNT} long slots, "
            f"got {len(short)} and {len(long)}"
        )

    had_completion = ever_completed or any(short) or any(long)

    slots = short if track == Track.SHORT else long
    if not 0 <= index < len(slots):
        raise ValueError(
            f"Slot index {index} out of range for {track.value} track (0-{len(slots) - 1})"
        )

    is_new_completion = not slots[index]
    flipped = slots[:index] + (is_new_completion,) + slots[index + 1:]
    if track == Track.SHORT:
        short = flipped
    else:
        long = flipped

    next_review_at = None
    if is_new_completion:
        if had_completion:
            next_review_at = now + next_offset(short, long)
        else:
            next_review_at = now + SHORT_OFFSETS[0]

    return MilestoneResult(
        short_slots=short,
        long_slots=long,
        is_new_completion=is_new_completion,
        next_review_at=next_review_at,
    )


def next_offset(short_slots: tuple[bool, ...], long_slots: tuple[bool, ...]) -> timedelta:
    """Offset of the first unchecked slot, short track first.

    A fully checked grid repeats the longest offset.
    """
    for done, offset in zip(short_slots, SHORT_OFFSETS):
        if not done:
            return offset
    for done, offset in zip(long_slots, LONG_OFFSETS):
        if not done:
            return offset
    return LONG_OFFSETS[-1]


def completion_ratio(short_slots, long_slots) -> float:
    """Share of the nine slots that are checked."""
    return (sum(1 for s in short_slots if s) + sum(1 for s in long_slots if s)) / TOTAL_SLOTS


def is_graduated(short_slots, long_slots) -> bool:
    return all(short_slots) and all(long_slots)
