"""
Data models and Pydantic schemas for the scheduling API.
"""
from .schemas import (
    Strategy,
    TimeSlot,
    Subject,
    Teacher,
    TeacherAssignment,
    TeacherAvailability,
    ExistingEntry,
    ScheduleConstraints,
    TimetableEntry,
    Conflict,
    MultiTeacherChoice,
    SubjectDistribution,
    ScheduleStatistics,
    ScheduleResult,
    MissingData,
    PrerequisiteReport,
    PrerequisiteErrorResponse,
    AutoGenerateSummary,
    AutoGenerateResponse,
    SelectionRequest
)

__all__ = [
    "Strategy",
    "TimeSlot",
    "Subject",
    "Teacher",
    "TeacherAssignment",
    "TeacherAvailability",
    "ExistingEntry",
    "ScheduleConstraints",
    "TimetableEntry",
    "Conflict",
    "MultiTeacherChoice",
    "SubjectDistribution",
    "ScheduleStatistics",
    "ScheduleResult",
    "MissingData",
    "PrerequisiteReport",
    "PrerequisiteErrorResponse",
    "AutoGenerateSummary",
    "AutoGenerateResponse",
    "SelectionRequest"
]
