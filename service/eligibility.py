"""
Eligibility index: which teachers may teach a subject, and when they are free.
"""

from bisect import bisect_right
from typing import Dict, List, Tuple
from models.schemas import TeacherAssignment, TeacherAvailability, TimeSlot
from service.time_grid import parse_minutes


class EligibilityIndex:
    """
    Read-only lookups built once per run from the raw assignment and
    availability lists.
    """

    def __init__(self, assignments: List[TeacherAssignment], availability: List[TeacherAvailability]):
        # subject_id -> teacher ids, input order (used as tie-break later)
        self._teachers_by_subject: Dict[str, List[str]] = {}
        for assignment in assignments:
            teachers = self._teachers_by_subject.setdefault(assignment.subject_id, [])
            if assignment.teacher_id not in teachers:
                teachers.append(assignment.teacher_id)

        windows: Dict[Tuple[str, int], List[Tuple[int, int]]] = {}
        for window in availability:
            key = (window.teacher_id, window.day_of_week)
            windows.setdefault(key, []).append(
                (parse_minutes(window.start_time), parse_minutes(window.end_time))
            )

        # (teacher_id, day) -> window starts, and the furthest end reached by
        # any window starting at or before each of them
        self._starts: Dict[Tuple[str, int], List[int]] = {}
        self._reach: Dict[Tuple[str, int], List[int]] = {}
        for key, day_windows in windows.items():
            day_windows.sort()
            reach = []
            furthest = -1
            for _, end in day_windows:
                furthest = max(furthest, end)
                reach.append(furthest)
            self._starts[key] = [start for start, _ in day_windows]
            self._reach[key] = reach

    def eligible_teachers(self, subject_id: str) -> List[str]:
        """Teachers assigned to the subject; empty when nobody is."""
        return list(self._teachers_by_subject.get(subject_id, []))

    def is_available(self, teacher_id: str, slot: TimeSlot) -> bool:
        """True iff one availability window fully contains the slot."""
        key = (teacher_id, slot.day_of_week)
        starts = self._starts.get(key)
        if not starts:
            return False

        slot_start = parse_minutes(slot.start_time)
        slot_end = parse_minutes(slot.end_time)
        idx = bisect_right(starts, slot_start) - 1
        return idx >= 0 and self._reach[key][idx] >= slot_end

    def available_teachers(self, subject_id: str, slot: TimeSlot) -> List[str]:
        return [
            teacher_id for teacher_id in self._teachers_by_subject.get(subject_id, [])
            if self.is_available(teacher_id, slot)
        ]
