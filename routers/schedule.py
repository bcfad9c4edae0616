from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from config import settings
from models.schemas import (
    AutoGenerateResponse, AutoGenerateSummary, PrerequisiteErrorResponse,
    ScheduleConstraints, ScheduleResult, SelectionRequest
)
from service.capacity_bound import PlacementCeiling
from service.prerequisites import validate_prerequisites
from service.scheduler import AutoScheduler, InvalidSelectionError, resolve_multi_teacher_selections

# Create a router instance
router = APIRouter()


def build_scheduler() -> AutoScheduler:
    ceiling = None
    if settings.compute_placement_ceiling:
        ceiling = PlacementCeiling(
            time_limit_seconds=settings.solver_timeout_seconds,
            random_seed=settings.solver_random_seed,
            num_workers=settings.solver_num_workers
        )
    return AutoScheduler(
        periods_per_weekly_hour=settings.periods_per_weekly_hour,
        ceiling=ceiling,
        default_strategy=settings.default_strategy
    )


@router.post(
    "/timetables/auto-generate",
    response_model=AutoGenerateResponse,
    responses={400: {"model": PrerequisiteErrorResponse}}
)
async def auto_generate_timetable(request: ScheduleConstraints):
    """
    Generate a draft timetable for one class.
    
    Conflicts and ambiguous teacher choices are returned as part of the
    result; a bundle missing prerequisite data is rejected with 400.
    """
    prerequisites = validate_prerequisites(request)
    if not prerequisites.valid:
        error = PrerequisiteErrorResponse(
            reason=prerequisites.reason,
            suggestions=prerequisites.suggestions,
            missing_data=prerequisites.missing_data
        )
        return JSONResponse(status_code=400, content=error.model_dump(by_alias=True))

    result = build_scheduler().generate_schedule(request)

    summary = AutoGenerateSummary(
        class_id=request.class_id,
        total_subjects=len(request.subjects),
        subjects_placed=result.statistics.subjects_placed,
        slots_placed=result.statistics.slots_placed,
        conflicts_found=len(result.conflicts),
        multi_teacher_choices=len(result.multi_teacher_slots),
        preserve_existing=request.preserve_existing
    )
    if result.multi_teacher_slots:
        next_steps = ["Review multi-teacher selections", "Confirm and save timetable"]
    else:
        next_steps = ["Review generated schedule", "Confirm and save timetable"]

    return AutoGenerateResponse(success=result.success, result=result, summary=summary, next_steps=next_steps)


@router.post("/timetables/resolve-selections", response_model=ScheduleResult)
async def resolve_selections(request: SelectionRequest):
    """
    Apply the administrator's teacher picks to a generated result.
    """
    try:
        return resolve_multi_teacher_selections(request.result, request.selections)
    except InvalidSelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
