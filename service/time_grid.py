"""
Weekly time grid for a single scheduling run.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from models.schemas import TimeSlot


def parse_minutes(time_str: str) -> int:
    """Parse HH:MM time string to minutes since midnight."""
    parsed = datetime.strptime(time_str, '%H:%M').time()
    return parsed.hour * 60 + parsed.minute


class TimeGrid:
    """
    Ordered, read-only view over the school's time slots.

    Only non-break slots are placement targets. They are ordered by
    (day, start, end); slots that tie keep their input order.
    """

    def __init__(self, time_slots: List[TimeSlot]):
        self._slots: Dict[str, TimeSlot] = {slot.id: slot for slot in time_slots}
        self._bounds: Dict[str, Tuple[int, int]] = {
            slot.id: (parse_minutes(slot.start_time), parse_minutes(slot.end_time))
            for slot in time_slots
        }

        teaching = [slot for slot in time_slots if not slot.is_break]
        teaching.sort(key=lambda s: (s.day_of_week, self._bounds[s.id]))
        self._teaching: Tuple[TimeSlot, ...] = tuple(teaching)
        self._position: Dict[str, int] = {slot.id: idx for idx, slot in enumerate(self._teaching)}

    @property
    def teaching_slots(self) -> Tuple[TimeSlot, ...]:
        return self._teaching

    def get(self, slot_id: str) -> Optional[TimeSlot]:
        return self._slots.get(slot_id)

    def position(self, slot_id: str) -> int:
        """Grid index of a teaching slot; unknown and break slots sort last."""
        return self._position.get(slot_id, len(self._teaching))

    def bounds(self, slot_id: str) -> Tuple[int, int]:
        """(start, end) of a slot in minutes since midnight."""
        return self._bounds[slot_id]

    def __len__(self) -> int:
        return len(self._teaching)
