"""
Demand model: how many periods each subject still needs this run.
"""

from dataclasses import dataclass
from typing import Dict, List
from models.schemas import ExistingEntry, Subject
from service.reporter import NO_QUOTA, PlacementReport


@dataclass
class SubjectDemand:
    """Open occurrences of one subject"""
    subject: Subject
    order: int      # position in the input list, final tie-break
    quota: int      # periods per week
    preserved: int  # periods already covered by kept entries
    remaining: int  # occurrences still to place

    @property
    def subject_id(self) -> str:
        return self.subject.id


def build_demand(
    subjects: List[Subject],
    preserved: List[ExistingEntry],
    report: PlacementReport,
    periods_per_weekly_hour: int = 1
) -> List[SubjectDemand]:
    """
    Translate weekly-hour quotas into open occurrences.

    Subjects without a quota are reported and left out of the result.
    """
    preserved_counts: Dict[str, int] = {}
    for entry in preserved:
        preserved_counts[entry.subject_id] = preserved_counts.get(entry.subject_id, 0) + 1

    demands = []
    for order, subject in enumerate(subjects):
        if not subject.weekly_hours:
            report.add_conflict(subject, NO_QUOTA)
            continue

        quota = subject.weekly_hours * periods_per_weekly_hour
        kept = preserved_counts.get(subject.id, 0)
        demands.append(SubjectDemand(
            subject=subject,
            order=order,
            quota=quota,
            preserved=kept,
            remaining=max(0, quota - kept)
        ))

    return demands
