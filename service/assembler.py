"""
Result assembly: timetable entries, statistics and distribution metrics.
"""

from typing import Dict, List, Optional
from models.schemas import (
    ExistingEntry, ScheduleConstraints, ScheduleResult, ScheduleStatistics,
    SubjectDistribution, TimetableEntry
)
from service.demand import SubjectDemand
from service.placement import Placement
from service.reporter import PlacementReport
from service.time_grid import TimeGrid

# (minimum periods per week, days the subject should be spread over)
DISTRIBUTION_RULES = [
    (5, 3),
    (3, 2),
    (1, 1),
]


def target_days(periods: int) -> int:
    for threshold, days in DISTRIBUTION_RULES:
        if periods >= threshold:
            return days
    return 0


def assemble_result(
    constraints: ScheduleConstraints,
    grid: TimeGrid,
    demands: List[SubjectDemand],
    placements: List[Placement],
    report: PlacementReport,
    preserved: List[ExistingEntry],
    placement_ceiling: Optional[int] = None
) -> ScheduleResult:
    """Package placements, conflicts and choices into a ScheduleResult."""
    kept = {(e.subject_id, e.teacher_id, e.time_slot_id) for e in preserved}

    timetable = [
        TimetableEntry(
            class_id=constraints.class_id,
            subject_id=p.subject_id,
            teacher_id=p.teacher_id,
            time_slot_id=p.time_slot_id,
            academic_year=constraints.academic_year
        )
        for p in placements
        if (p.subject_id, p.teacher_id, p.time_slot_id) not in kept
    ]

    conflicts = report.conflicts
    distribution = _distribution(grid, demands, timetable, preserved)

    days_with_classes = set()
    for slot_id in [e.time_slot_id for e in timetable] + [e.time_slot_id for e in preserved]:
        slot = grid.get(slot_id)
        if slot is not None and not slot.is_break:
            days_with_classes.add(slot.day_of_week)

    quality = 0.0
    if distribution:
        quality = sum(
            0.5 * d.meets_target + 0.5 * d.is_balanced for d in distribution.values()
        ) / len(distribution)

    statistics = ScheduleStatistics(
        subjects_placed=sum(1 for d in demands if d.remaining == 0),
        slots_placed=len(timetable),
        total_subjects=len(constraints.subjects),
        total_slots_needed=sum(d.quota for d in demands),
        slots_conflicted=sum(c.unplaced_count for c in conflicts),
        days_with_classes=len(days_with_classes),
        distribution_quality=round(quality, 4),
        placement_ceiling=placement_ceiling
    )

    return ScheduleResult(
        success=len(conflicts) == 0,
        timetable=timetable,
        conflicts=conflicts,
        multi_teacher_slots=report.multi_teacher_slots,
        statistics=statistics,
        distribution=distribution
    )


def _distribution(
    grid: TimeGrid,
    demands: List[SubjectDemand],
    timetable: List[TimetableEntry],
    preserved: List[ExistingEntry]
) -> Dict[str, SubjectDistribution]:
    by_subject: Dict[str, Dict[int, int]] = {d.subject_id: {} for d in demands}
    for entry in list(preserved) + list(timetable):
        slot = grid.get(entry.time_slot_id)
        if slot is None or entry.subject_id not in by_subject:
            continue
        days = by_subject[entry.subject_id]
        days[slot.day_of_week] = days.get(slot.day_of_week, 0) + 1

    distribution = {}
    for demand in demands:
        by_day = dict(sorted(by_subject[demand.subject_id].items()))
        total = sum(by_day.values())
        target = target_days(demand.quota)
        distribution[demand.subject_id] = SubjectDistribution(
            subject_name=demand.subject.name,
            total_hours=total,
            by_day=by_day,
            unique_days=len(by_day),
            target_days=target,
            meets_target=len(by_day) >= target,
            # No single day holds more than half of the subject's periods
            is_balanced=total == 0 or max(by_day.values()) * 2 <= total
        )

    return distribution
