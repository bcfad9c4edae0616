"""
Placement engine.

Assigns open subject occurrences to (teacher, time slot) pairs for one class
using a most-constrained-first greedy search with a one-step repair when a
subject runs out of options.

Hard constraints:
    A. the class has at most one entry per time slot (preserved entries included)
    B. the teacher is assigned to the subject and available for the whole slot
    C. break slots are never used
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple
from models.schemas import ExistingEntry, TimeSlot
from service.demand import SubjectDemand
from service.eligibility import EligibilityIndex
from service.reporter import (
    NO_AVAILABLE_TEACHER, NO_ELIGIBLE_TEACHER, NO_OPEN_SLOT, PlacementReport
)
from service.time_grid import TimeGrid

logger = logging.getLogger(__name__)

# slot_id -> teachers eligible and available there, in assignment order
SlotOptions = Dict[str, List[str]]


@dataclass
class Placement:
    subject_id: str
    time_slot_id: str
    teacher_id: str


class PlacementEngine:
    """
    Owns the occupancy state of a single run. Not reusable across runs and
    never shared between invocations.
    """

    STRATEGIES = ("balanced", "morning-heavy", "afternoon-heavy")

    def __init__(
        self,
        grid: TimeGrid,
        index: EligibilityIndex,
        demands: List[SubjectDemand],
        report: PlacementReport,
        strategy: str = "balanced",
        preserved: Optional[List[ExistingEntry]] = None
    ):
        if strategy not in self.STRATEGIES:
            raise ValueError(f"Unknown strategy: {strategy}")

        self.grid = grid
        self.index = index
        self.report = report
        self.strategy = strategy
        self.demands: Dict[str, SubjectDemand] = {d.subject_id: d for d in demands}

        # Occupancy
        self.occupied: Set[str] = set()
        self.placements: Dict[str, Placement] = {}  # slot_id -> placement made this run
        self.teacher_load: Dict[str, int] = {}  # periods assigned in this run only
        self.subject_days: Dict[str, Dict[int, int]] = {d.subject_id: {} for d in demands}
        self.day_load: Dict[int, int] = {}

        for entry in preserved or []:
            self.occupied.add(entry.time_slot_id)
            slot = grid.get(entry.time_slot_id)
            if slot is not None:
                self._count_day(entry.subject_id, slot, 1)

        # Eligibility and availability never change during a run
        self._options: Dict[str, SlotOptions] = {
            d.subject_id: self._static_options(d.subject_id) for d in demands
        }

    def _static_options(self, subject_id: str) -> SlotOptions:
        options = {}
        for slot in self.grid.teaching_slots:
            teachers = self.index.available_teachers(subject_id, slot)
            if teachers:
                options[slot.id] = teachers
        return options

    # ===========================
    # Main loop
    # ===========================

    def run(self) -> List[Placement]:
        """Place as many open occurrences as possible and report the rest."""
        open_demands = [d for d in self.demands.values() if d.remaining > 0]
        open_demands.sort(key=lambda d: d.order)

        while open_demands:
            candidates = {d.subject_id: self.candidates(d.subject_id) for d in open_demands}

            stuck = next((d for d in open_demands if not candidates[d.subject_id]), None)
            if stuck is not None:
                if not self._repair(stuck):
                    self._give_up(stuck)
                    open_demands.remove(stuck)
                elif stuck.remaining == 0:
                    open_demands.remove(stuck)
                continue

            # Most constrained subject first
            demand = min(
                open_demands,
                key=lambda d: (self._pair_count(candidates[d.subject_id]), d.order)
            )
            slot_id, teachers = self._ordered_slots(demand, candidates[demand.subject_id])[0]
            self._place(demand, slot_id, teachers)

            if demand.remaining == 0:
                open_demands.remove(demand)

        return sorted(self.placements.values(), key=lambda p: self.grid.position(p.time_slot_id))

    def candidates(self, subject_id: str) -> SlotOptions:
        """Open slots where the subject has at least one usable teacher."""
        return {
            slot_id: teachers
            for slot_id, teachers in self._options.get(subject_id, {}).items()
            if slot_id not in self.occupied
        }

    @staticmethod
    def _pair_count(options: SlotOptions) -> int:
        return sum(len(teachers) for teachers in options.values())

    # ===========================
    # Ordering heuristics
    # ===========================

    def _slot_key(self, demand: SubjectDemand, slot_id: str) -> Tuple:
        slot = self.grid.get(slot_id)
        start, _ = self.grid.bounds(slot_id)
        day = slot.day_of_week
        subject_count = self.subject_days[demand.subject_id].get(day, 0)
        day_count = self.day_load.get(day, 0)
        position = self.grid.position(slot_id)

        if self.strategy == "morning-heavy":
            return (start, subject_count, day_count, day, position)
        if self.strategy == "afternoon-heavy":
            return (-start, subject_count, day_count, day, position)
        # balanced: days this subject uses least, then the class's lightest day
        return (subject_count, day_count, day, start, position)

    def _ordered_slots(self, demand: SubjectDemand, options: SlotOptions) -> List[Tuple[str, List[str]]]:
        return sorted(options.items(), key=lambda item: self._slot_key(demand, item[0]))

    def _rank_teachers(self, teachers: List[str]) -> List[str]:
        """Least-loaded first; assignment order breaks ties."""
        ranked = sorted(enumerate(teachers), key=lambda item: (self.teacher_load.get(item[1], 0), item[0]))
        return [teacher_id for _, teacher_id in ranked]

    # ===========================
    # State changes
    # ===========================

    def _count_day(self, subject_id: str, slot: TimeSlot, delta: int):
        day = slot.day_of_week
        self.day_load[day] = self.day_load.get(day, 0) + delta
        days = self.subject_days.setdefault(subject_id, {})
        days[day] = days.get(day, 0) + delta
        if days[day] == 0:
            del days[day]

    def _place(self, demand: SubjectDemand, slot_id: str, teachers: List[str]) -> Placement:
        ranked = self._rank_teachers(teachers)
        chosen = ranked[0]
        if len(ranked) > 1:
            self.report.record_choice(demand.subject_id, slot_id, ranked, chosen)

        placement = Placement(subject_id=demand.subject_id, time_slot_id=slot_id, teacher_id=chosen)
        self.placements[slot_id] = placement
        self.occupied.add(slot_id)
        self.teacher_load[chosen] = self.teacher_load.get(chosen, 0) + 1
        self._count_day(demand.subject_id, self.grid.get(slot_id), 1)
        demand.remaining -= 1
        return placement

    def _unplace(self, placement: Placement):
        slot_id = placement.time_slot_id
        del self.placements[slot_id]
        self.occupied.discard(slot_id)
        self.teacher_load[placement.teacher_id] -= 1
        self._count_day(placement.subject_id, self.grid.get(slot_id), -1)
        self.report.withdraw_choice(slot_id)
        self.demands[placement.subject_id].remaining += 1

    def _repair(self, stuck: SubjectDemand) -> bool:
        """
        Free one slot for a subject with no candidates by moving a placement
        made in this run to another open slot. Preserved entries stay put.
        """
        for slot_id, teachers in self._options.get(stuck.subject_id, {}).items():
            occupant = self.placements.get(slot_id)
            if occupant is None or occupant.subject_id == stuck.subject_id:
                continue

            alternatives = self.candidates(occupant.subject_id)
            if not alternatives:
                continue

            moved = self.demands[occupant.subject_id]
            self._unplace(occupant)
            new_slot, new_teachers = self._ordered_slots(moved, alternatives)[0]
            self._place(moved, new_slot, new_teachers)
            self._place(stuck, slot_id, teachers)
            logger.debug(
                f"Moved {occupant.subject_id} from {slot_id} to {new_slot} to make room for {stuck.subject_id}"
            )
            return True

        return False

    def _give_up(self, demand: SubjectDemand):
        if not self.index.eligible_teachers(demand.subject_id):
            reason = NO_ELIGIBLE_TEACHER
        elif all(slot.id in self.occupied for slot in self.grid.teaching_slots):
            reason = NO_OPEN_SLOT
        else:
            reason = NO_AVAILABLE_TEACHER

        self.report.add_conflict(demand.subject, reason, demand.remaining, demand.quota)
