import re
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Dict, Optional, Literal


TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

Strategy = Literal["balanced", "morning-heavy", "afternoon-heavy"]


def _to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def _check_time(value: str) -> str:
    if not TIME_PATTERN.match(value):
        raise ValueError("must be in HH:MM format (e.g., '08:00')")
    return value


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON names over snake_case attributes."""

    class Config:
        alias_generator = _to_camel
        populate_by_name = True


# ===========================
# Time Grid Models
# ===========================

class TimeSlot(CamelModel):
    """A single period of the school's weekly grid"""
    id: str
    day_of_week: int = Field(ge=1, le=7)
    start_time: str  # HH:MM format, e.g., "08:00"
    end_time: str    # HH:MM format
    is_break: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        return _check_time(value)

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Time slot {self.id}: start time ({self.start_time}) must be before end time ({self.end_time})"
            )
        return self


# ===========================
# Subject & Teacher Models
# ===========================

class Subject(CamelModel):
    id: str
    name: str
    weekly_hours: Optional[int] = Field(default=None, ge=0)  # None == no quota set


class Teacher(CamelModel):
    """Informational only; used for reporting"""
    id: str
    name: str
    email: str


class TeacherAssignment(CamelModel):
    """Declares that a teacher is qualified to teach a subject for this class"""
    teacher_id: str
    subject_id: str


class TeacherAvailability(CamelModel):
    """Recurring weekly window in which a teacher can teach"""
    teacher_id: str
    day_of_week: int = Field(ge=1, le=7)
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        return _check_time(value)

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Availability for teacher {self.teacher_id}: start time ({self.start_time}) "
                f"must be before end time ({self.end_time})"
            )
        return self


class ExistingEntry(CamelModel):
    """Entry already committed for this class, kept when preserving"""
    subject_id: str
    teacher_id: str
    time_slot_id: str


# ===========================
# Request Schema
# ===========================

class ScheduleConstraints(CamelModel):
    """Complete constraint bundle for one class"""
    class_id: str
    academic_year: str
    subjects: List[Subject]
    teachers: List[Teacher]
    teacher_assignments: List[TeacherAssignment]
    teacher_availability: List[TeacherAvailability]
    time_slots: List[TimeSlot]
    existing_timetable: List[ExistingEntry] = []
    preserve_existing: bool = False
    strategy: Optional[Strategy] = None  # None == configured default

    @model_validator(mode="after")
    def check_unique_slots(self):
        seen = set()
        for slot in self.time_slots:
            if slot.id in seen:
                raise ValueError(f"Duplicate time slot id: {slot.id}")
            seen.add(slot.id)
        return self


# ===========================
# Response Schema
# ===========================

class TimetableEntry(CamelModel):
    class_id: str
    subject_id: str
    teacher_id: str
    time_slot_id: str
    academic_year: str
    status: Literal["draft"] = "draft"


class Conflict(CamelModel):
    """Periods of a subject that could not be placed"""
    subject_id: str
    reason: str
    unplaced_count: int
    message: str = ""  # Human-readable: "Maths: 2 of 5 periods unplaced (...)"


class MultiTeacherChoice(CamelModel):
    """Slot where several teachers were equally valid; chosen is provisional"""
    subject_id: str
    time_slot_id: str
    candidates: List[str]
    chosen: str


class SubjectDistribution(CamelModel):
    subject_name: str
    total_hours: int
    by_day: Dict[int, int]
    unique_days: int
    target_days: int
    meets_target: bool
    is_balanced: bool


class ScheduleStatistics(CamelModel):
    subjects_placed: int
    slots_placed: int
    total_subjects: int = 0
    total_slots_needed: int = 0
    slots_conflicted: int = 0
    days_with_classes: int = 0
    distribution_quality: float = 0.0
    placement_ceiling: Optional[int] = None  # Max placeable, from CP-SAT


class ScheduleResult(CamelModel):
    """Complete scheduling result"""
    success: bool
    timetable: List[TimetableEntry] = []
    conflicts: List[Conflict] = []
    multi_teacher_slots: List[MultiTeacherChoice] = []
    statistics: ScheduleStatistics
    distribution: Dict[str, SubjectDistribution] = {}


# ===========================
# Prerequisite Check
# ===========================

class MissingData(CamelModel):
    subjects: bool = False
    subjects_with_quotas: bool = False
    teachers: bool = False
    teacher_assignments: bool = False
    teacher_availability: bool = False
    time_slots: bool = False


class PrerequisiteReport(CamelModel):
    valid: bool
    reason: Optional[str] = None
    suggestions: List[str] = []
    missing_data: MissingData = MissingData()


class PrerequisiteErrorResponse(CamelModel):
    error: str = "Cannot generate timetable"
    reason: Optional[str] = None
    suggestions: List[str] = []
    missing_data: MissingData = MissingData()


# ===========================
# Endpoint Envelopes
# ===========================

class AutoGenerateSummary(CamelModel):
    class_id: str
    total_subjects: int
    subjects_placed: int
    slots_placed: int
    conflicts_found: int
    multi_teacher_choices: int
    preserve_existing: bool


class AutoGenerateResponse(CamelModel):
    success: bool
    result: ScheduleResult
    summary: AutoGenerateSummary
    next_steps: List[str] = []


class SelectionRequest(CamelModel):
    """Administrator's picks for ambiguous slots: timeSlotId -> teacherId"""
    result: ScheduleResult
    selections: Dict[str, str]
