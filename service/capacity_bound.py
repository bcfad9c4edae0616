"""
OR-Tools CP-SAT placement ceiling.

Computes the largest number of open occurrences that could be placed for a
class under the hard constraints, ignoring strategy and day balance. Comparing
it with the greedy result tells a heuristic shortfall apart from a bundle that
simply cannot be satisfied.
"""

from ortools.sat.python import cp_model
from typing import Dict, List, Optional, Set, Tuple
from service.demand import SubjectDemand
from service.eligibility import EligibilityIndex
from service.time_grid import TimeGrid
import logging

logger = logging.getLogger(__name__)


class PlacementCeiling:
    """
    Exact maximum placement count via CP-SAT.

    Within one class a slot holds one subject, and any teacher available at
    that slot will do, so the model only needs (subject, slot) variables.
    """

    def __init__(self, time_limit_seconds: int = 10, random_seed: int = 42, num_workers: int = 1):
        """
        Initialize the solver.

        Args:
            time_limit_seconds: Maximum time allowed for solver
            random_seed: Seed for reproducible search
            num_workers: Number of search workers (1 keeps runs deterministic)
        """
        self.time_limit_seconds = time_limit_seconds
        self.random_seed = random_seed
        self.num_workers = num_workers

    def compute(
        self,
        grid: TimeGrid,
        index: EligibilityIndex,
        demands: List[SubjectDemand],
        occupied: Set[str]
    ) -> Optional[int]:
        """
        Return the optimal placement count, or None when the solver cannot
        prove optimality within the time limit.
        """
        try:
            return self._solve(grid, index, demands, occupied)
        except Exception as e:
            logger.error(f"Placement ceiling error: {str(e)}", exc_info=True)
            return None

    def _solve(self, grid, index, demands, occupied) -> Optional[int]:
        model = cp_model.CpModel()
        solver = cp_model.CpSolver()

        # Solver parameters for deterministic behavior
        solver.parameters.random_seed = self.random_seed
        solver.parameters.num_search_workers = self.num_workers
        solver.parameters.max_time_in_seconds = self.time_limit_seconds

        # x[(subject_id, slot_id)] = 1 if an occurrence is placed there
        variables: Dict[Tuple[str, str], cp_model.IntVar] = {}
        for demand in demands:
            if demand.remaining <= 0:
                continue
            for slot in grid.teaching_slots:
                if slot.id in occupied:
                    continue
                if index.available_teachers(demand.subject_id, slot):
                    variables[(demand.subject_id, slot.id)] = model.NewBoolVar(
                        f'subject_{demand.subject_id}_slot_{slot.id}'
                    )

        if not variables:
            return 0

        # 1. Quota: never more than the open occurrences of a subject
        for demand in demands:
            subject_vars = [var for (subject_id, _), var in variables.items() if subject_id == demand.subject_id]
            if subject_vars:
                model.Add(sum(subject_vars) <= demand.remaining)

        # 2. One subject per slot for the class
        for slot in grid.teaching_slots:
            slot_vars = [var for (_, slot_id), var in variables.items() if slot_id == slot.id]
            if len(slot_vars) > 1:
                model.Add(sum(slot_vars) <= 1)

        model.Maximize(sum(variables.values()))
        status = solver.Solve(model)

        if status != cp_model.OPTIMAL:
            logger.warning(f"Placement ceiling not proven optimal (status {solver.StatusName(status)})")
            return None

        return int(solver.ObjectiveValue())
