"""
Checks that a constraint bundle holds enough data to attempt generation.
"""

from models.schemas import MissingData, PrerequisiteReport, ScheduleConstraints


def validate_prerequisites(constraints: ScheduleConstraints) -> PrerequisiteReport:
    """
    Validate that all prerequisites are met for auto-generation.

    The first missing item decides the reason and suggestions; the
    missing_data flags always cover every item.
    """
    missing = MissingData(
        subjects=not constraints.subjects,
        subjects_with_quotas=not any(s.weekly_hours for s in constraints.subjects),
        teachers=not constraints.teachers,
        teacher_assignments=not constraints.teacher_assignments,
        teacher_availability=not constraints.teacher_availability,
        time_slots=not any(not slot.is_break for slot in constraints.time_slots),
    )

    if missing.subjects:
        reason = "No subjects found for this class"
        suggestions = [
            "Add subjects to your school",
            "Assign teachers to subjects for this class",
        ]
    elif missing.subjects_with_quotas:
        count = len(constraints.subjects)
        reason = f"No subjects have weekly hour quotas set ({count} subject{'' if count == 1 else 's'} found without quotas)"
        suggestions = [
            "Edit each subject and set the weekly hours field",
            "Example: Math = 5 hours/week, French = 4 hours/week",
            f"Subjects needing quotas: {', '.join(s.name for s in constraints.subjects)}",
        ]
    elif missing.teachers:
        reason = "No teachers assigned to this class"
        suggestions = ["Assign teachers to subjects for this class"]
    elif missing.teacher_assignments:
        reason = "No teacher-subject assignments found for this class"
        suggestions = ["Assign at least one qualified teacher to each subject"]
    elif missing.teacher_availability:
        reason = "No teacher availability has been declared"
        suggestions = ["Ask teachers to set their weekly availability windows"]
    elif missing.time_slots:
        reason = "No teaching time slots are configured"
        suggestions = ["Create time slots for the school week (break slots are not used for teaching)"]
    else:
        return PrerequisiteReport(valid=True, missing_data=missing)

    return PrerequisiteReport(valid=False, reason=reason, suggestions=suggestions, missing_data=missing)
