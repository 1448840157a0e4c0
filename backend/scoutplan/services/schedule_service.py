"""Program schedule derivation.

Pure functions that turn an ordered list of program entries into start/end
times, plus the drag-reorder renumbering and a small optimistic editor that
keeps the last persisted state around so a failed write can be undone.
Nothing in here touches the database; persistence is passed in as a callable.
"""

import logging
from typing import Callable, List, Mapping, Optional, Sequence

from scoutplan.schemas.program import ProgramEntryIn, ScheduledEntry, WriteResult
from scoutplan.utils.helpers import format_clock, parse_clock

logger = logging.getLogger(__name__)

ActivityLookup = Mapping[int, Optional[int]]


def resolve_duration(entry: ProgramEntryIn, activity_lookup: ActivityLookup) -> int:
    """Return the entry length in minutes, never negative.

    Missing data (custom block without a duration, activity that no longer
    exists) resolves to a zero-length block instead of failing.
    """
    if entry.entry_type == "custom":
        minutes = entry.custom_duration_minutes
    elif entry.activity_id is None:
        minutes = None
    else:
        minutes = activity_lookup.get(entry.activity_id)
    if minutes is None or minutes < 0:
        return 0
    return int(minutes)


def compute_schedule(
    entries: Sequence[ProgramEntryIn],
    program_start_time: str,
    activity_lookup: ActivityLookup,
) -> List[ScheduledEntry]:
    # InvalidTimeError propagates: a bad start time must not yield bogus rows.
    current = parse_clock(program_start_time)
    scheduled = []
    for entry in entries:
        duration = resolve_duration(entry, activity_lookup)
        end = current + duration
        scheduled.append(
            ScheduledEntry(
                entry=entry,
                start_time=format_clock(current),
                end_time=format_clock(end),
                duration_minutes=duration,
            )
        )
        current = end
    return scheduled


def total_duration(scheduled: Sequence[ScheduledEntry]) -> int:
    return sum(row.duration_minutes for row in scheduled)


def renumber(entries: Sequence[ProgramEntryIn]) -> List[ProgramEntryIn]:
    return [entry.model_copy(update={"position": index}) for index, entry in enumerate(entries)]


def reorder(
    entries: Sequence[ProgramEntryIn],
    moved_id: str,
    from_index: int,
    to_index: int,
) -> List[ProgramEntryIn]:
    """Move ``moved_id`` to ``to_index`` and renumber positions 0..n-1.

    Unknown ids leave the list untouched. When ``from_index`` does not point at
    ``moved_id`` (stale client state) the id wins.
    """
    ids = [entry.id for entry in entries]
    if moved_id not in ids:
        logger.info("[schedule] reorder ignored, unknown entry id=%s", moved_id)
        return list(entries)
    if from_index >= len(ids) or ids[from_index] != moved_id:
        from_index = ids.index(moved_id)
    to_index = max(0, min(to_index, len(ids) - 1))

    moved = list(entries)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return renumber(moved)


class ScheduleEditor:
    """Two-phase edit of a program's entry list.

    ``apply`` installs a tentative list; ``save`` hands it to a writer and
    falls back to the last known-good snapshot when the writer reports failure.
    """

    def __init__(self, entries: Sequence[ProgramEntryIn]):
        self._committed = list(entries)
        self._current = list(entries)

    @property
    def entries(self) -> List[ProgramEntryIn]:
        return list(self._current)

    @property
    def committed(self) -> List[ProgramEntryIn]:
        return list(self._committed)

    @property
    def dirty(self) -> bool:
        return self._current != self._committed

    def apply(self, entries: Sequence[ProgramEntryIn]) -> List[ProgramEntryIn]:
        self._current = list(entries)
        return self.entries

    def save(self, writer: Callable[[List[ProgramEntryIn]], WriteResult]) -> WriteResult:
        result = writer(self.entries)
        if result.ok:
            self._committed = list(self._current)
        else:
            logger.warning("[schedule] write failed, restoring last saved entries: %s", result.error)
            self._current = list(self._committed)
        return result
