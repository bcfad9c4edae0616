"""
Auto-scheduler entry points.

Wires the time grid, eligibility index, demand model and placement engine
together for one class, and applies an administrator's teacher picks to a
finished result.
"""

from typing import Dict, Optional
from models.schemas import ScheduleConstraints, ScheduleResult
from service.assembler import assemble_result
from service.capacity_bound import PlacementCeiling
from service.demand import build_demand
from service.eligibility import EligibilityIndex
from service.placement import PlacementEngine
from service.reporter import PlacementReport
from service.time_grid import TimeGrid
import logging

logger = logging.getLogger(__name__)


class InvalidSelectionError(ValueError):
    """A teacher pick that does not match a recorded multi-teacher choice."""


class AutoScheduler:
    """
    Greedy timetable generator for a single class.

    Every call is an independent, deterministic run; the instance only
    carries configuration.
    """

    def __init__(
        self,
        periods_per_weekly_hour: int = 1,
        ceiling: Optional[PlacementCeiling] = None,
        default_strategy: str = "balanced"
    ):
        """
        Initialize the scheduler.

        Args:
            periods_per_weekly_hour: Time slots that make up one weekly hour
            ceiling: Optional CP-SAT solver reporting the best achievable count
            default_strategy: Slot ordering used when a bundle names none
        """
        if periods_per_weekly_hour < 1:
            raise ValueError("periods_per_weekly_hour must be at least 1")
        if default_strategy not in PlacementEngine.STRATEGIES:
            raise ValueError(f"Unknown strategy: {default_strategy}")
        self.periods_per_weekly_hour = periods_per_weekly_hour
        self.ceiling = ceiling
        self.default_strategy = default_strategy

    def generate_schedule(self, constraints: ScheduleConstraints) -> ScheduleResult:
        """
        Main entry point to generate a draft timetable.

        Args:
            constraints: The fully assembled constraint bundle for one class

        Returns:
            ScheduleResult with entries, conflicts, ambiguous slots and statistics
        """
        preserved = list(constraints.existing_timetable) if constraints.preserve_existing else []
        strategy = constraints.strategy or self.default_strategy

        grid = TimeGrid(constraints.time_slots)
        index = EligibilityIndex(constraints.teacher_assignments, constraints.teacher_availability)
        report = PlacementReport(constraints.subjects, grid)
        demands = build_demand(constraints.subjects, preserved, report, self.periods_per_weekly_hour)

        logger.info(
            f"Scheduling class {constraints.class_id}: {len(demands)} subjects with quota, "
            f"{len(grid)} teaching slots, strategy={strategy}, preserved={len(preserved)}"
        )

        ceiling = None
        if self.ceiling is not None:
            ceiling = self.ceiling.compute(
                grid, index, demands, {entry.time_slot_id for entry in preserved}
            )

        engine = PlacementEngine(grid, index, demands, report, strategy, preserved)
        placements = engine.run()

        result = assemble_result(constraints, grid, demands, placements, report, preserved, ceiling)

        logger.info(
            f"Class {constraints.class_id}: placed {result.statistics.slots_placed} periods, "
            f"{len(result.conflicts)} conflicts, {len(result.multi_teacher_slots)} multi-teacher slots"
        )
        return result


def generate_schedule(constraints: ScheduleConstraints, periods_per_weekly_hour: int = 1) -> ScheduleResult:
    """Run the scheduler without the CP-SAT ceiling."""
    return AutoScheduler(periods_per_weekly_hour=periods_per_weekly_hour).generate_schedule(constraints)


def resolve_multi_teacher_selections(result: ScheduleResult, selections: Dict[str, str]) -> ScheduleResult:
    """
    Apply an administrator's teacher picks (time_slot_id -> teacher_id).

    Returns a new result; resolved choices are dropped from
    multi_teacher_slots, everything else is carried over unchanged.
    """
    choices = {choice.time_slot_id: choice for choice in result.multi_teacher_slots}

    for slot_id, teacher_id in selections.items():
        choice = choices.get(slot_id)
        if choice is None:
            raise InvalidSelectionError(f"No teacher choice recorded for time slot {slot_id}")
        if teacher_id not in choice.candidates:
            raise InvalidSelectionError(
                f"Teacher {teacher_id} is not a candidate for time slot {slot_id}"
            )

    timetable = [
        entry.model_copy(update={"teacher_id": selections[entry.time_slot_id]})
        if entry.time_slot_id in selections else entry.model_copy()
        for entry in result.timetable
    ]
    remaining = [choice.model_copy() for choice in result.multi_teacher_slots if choice.time_slot_id not in selections]

    return result.model_copy(update={"timetable": timetable, "multi_teacher_slots": remaining})
