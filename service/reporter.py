"""
Collects conflicts and ambiguous teacher choices produced during placement.
"""

import logging
from typing import Dict, List
from models.schemas import Conflict, MultiTeacherChoice, Subject
from service.time_grid import TimeGrid

logger = logging.getLogger(__name__)

NO_QUOTA = "no quota set"
NO_ELIGIBLE_TEACHER = "no eligible teacher"
NO_AVAILABLE_TEACHER = "no available teacher at any open slot"
NO_OPEN_SLOT = "no open slot remains"


class PlacementReport:
    """
    Aggregates Conflict and MultiTeacherChoice records.

    Output lists are sorted by subject name so results are stable
    regardless of the order in which the engine produced them.
    """

    def __init__(self, subjects: List[Subject], grid: TimeGrid):
        self.grid = grid
        self._subjects: Dict[str, Subject] = {subject.id: subject for subject in subjects}
        self._conflicts: List[Conflict] = []
        self._choices: Dict[str, MultiTeacherChoice] = {}  # time_slot_id -> choice

    def add_conflict(self, subject: Subject, reason: str, unplaced_count: int = 0, requested: int = 0):
        if reason == NO_QUOTA:
            message = f"{subject.name}: {NO_QUOTA}"
        else:
            message = f"{subject.name}: {unplaced_count} of {requested} periods unplaced ({reason})"

        logger.warning(message)
        self._conflicts.append(Conflict(
            subject_id=subject.id,
            reason=reason,
            unplaced_count=unplaced_count,
            message=message
        ))

    def record_choice(self, subject_id: str, time_slot_id: str, candidates: List[str], chosen: str):
        logger.debug(f"Slot {time_slot_id}: {len(candidates)} teachers valid for {subject_id}, chose {chosen}")
        self._choices[time_slot_id] = MultiTeacherChoice(
            subject_id=subject_id,
            time_slot_id=time_slot_id,
            candidates=list(candidates),
            chosen=chosen
        )

    def withdraw_choice(self, time_slot_id: str):
        self._choices.pop(time_slot_id, None)

    def _subject_key(self, subject_id: str):
        subject = self._subjects.get(subject_id)
        return (subject.name if subject else "", subject_id)

    @property
    def conflicts(self) -> List[Conflict]:
        return sorted(self._conflicts, key=lambda c: self._subject_key(c.subject_id))

    @property
    def multi_teacher_slots(self) -> List[MultiTeacherChoice]:
        return sorted(
            self._choices.values(),
            key=lambda c: self._subject_key(c.subject_id) + (self.grid.position(c.time_slot_id),)
        )
