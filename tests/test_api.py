"""
Test the scheduling API with self-contained test data.
"""
import pytest
from fastapi.testclient import TestClient
from config import settings
from main import app


client = TestClient(app)


# Test data fixtures
def get_minimal_request():
    """Return minimal valid auto-generate request."""
    return {
        "classId": "class-1",
        "academicYear": "2025-2026",
        "subjects": [
            {"id": "math", "name": "Mathematics", "weeklyHours": 2}
        ],
        "teachers": [
            {"id": "t1", "name": "John Doe", "email": "john@school.test"}
        ],
        "teacherAssignments": [
            {"teacherId": "t1", "subjectId": "math"}
        ],
        "teacherAvailability": [
            {"teacherId": "t1", "dayOfWeek": 1, "startTime": "08:00", "endTime": "12:00"},
            {"teacherId": "t1", "dayOfWeek": 2, "startTime": "08:00", "endTime": "12:00"}
        ],
        "timeSlots": [
            {"id": "s1", "dayOfWeek": 1, "startTime": "08:00", "endTime": "09:00", "isBreak": False},
            {"id": "s2", "dayOfWeek": 1, "startTime": "09:00", "endTime": "10:00", "isBreak": False},
            {"id": "b1", "dayOfWeek": 1, "startTime": "10:00", "endTime": "10:30", "isBreak": True},
            {"id": "s3", "dayOfWeek": 2, "startTime": "08:00", "endTime": "09:00", "isBreak": False}
        ]
    }


def get_ambiguous_request():
    """Return request where two teachers can take every slot."""
    request = get_minimal_request()
    request["teachers"].append({"id": "t2", "name": "Jane Roe", "email": "jane@school.test"})
    request["teacherAssignments"].append({"teacherId": "t2", "subjectId": "math"})
    request["teacherAvailability"].extend([
        {"teacherId": "t2", "dayOfWeek": 1, "startTime": "08:00", "endTime": "12:00"},
        {"teacherId": "t2", "dayOfWeek": 2, "startTime": "08:00", "endTime": "12:00"}
    ])
    return request


def test_root_endpoint():
    """Test root endpoint is accessible."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert data["status"] == "healthy"


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_auto_generate_minimal():
    """Test /api/v1/timetables/auto-generate with minimal valid request."""
    response = client.post("/api/v1/timetables/auto-generate", json=get_minimal_request())

    assert response.status_code == 200
    data = response.json()

    # Verify response structure
    assert data["success"] is True
    assert data["nextSteps"] == ["Review generated schedule", "Confirm and save timetable"]

    result = data["result"]
    assert [e["timeSlotId"] for e in result["timetable"]] == ["s1", "s3"]
    for entry in result["timetable"]:
        assert entry["classId"] == "class-1"
        assert entry["subjectId"] == "math"
        assert entry["teacherId"] == "t1"
        assert entry["academicYear"] == "2025-2026"
        assert entry["status"] == "draft"
    assert result["conflicts"] == []
    assert result["multiTeacherSlots"] == []
    assert result["statistics"]["subjectsPlaced"] == 1
    assert result["statistics"]["slotsPlaced"] == 2
    assert result["statistics"]["placementCeiling"] == 2
    assert result["distribution"]["math"]["byDay"] == {"1": 1, "2": 1}

    summary = data["summary"]
    assert summary["classId"] == "class-1"
    assert summary["conflictsFound"] == 0
    assert summary["preserveExisting"] is False


def test_auto_generate_accepts_strategy():
    request = get_minimal_request()
    request["subjects"][0]["weeklyHours"] = 1
    request["strategy"] = "afternoon-heavy"

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 200
    assert [e["timeSlotId"] for e in response.json()["result"]["timetable"]] == ["s2"]


def test_auto_generate_uses_configured_default_strategy(monkeypatch):
    """A bundle without a strategy falls back to the configured default."""
    monkeypatch.setattr(settings, "default_strategy", "afternoon-heavy")
    request = get_minimal_request()
    request["subjects"][0]["weeklyHours"] = 1

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 200
    assert [e["timeSlotId"] for e in response.json()["result"]["timetable"]] == ["s2"]


def test_auto_generate_reports_conflicts_without_failing():
    """Shortfalls are data: HTTP 200 with success=false and itemized conflicts."""
    request = get_minimal_request()
    request["subjects"][0]["weeklyHours"] = 5

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert len(data["result"]["timetable"]) == 3
    conflict = data["result"]["conflicts"][0]
    assert conflict["subjectId"] == "math"
    assert conflict["reason"] == "no open slot remains"
    assert conflict["unplacedCount"] == 2
    assert conflict["message"] == "Mathematics: 2 of 5 periods unplaced (no open slot remains)"


def test_auto_generate_flags_multi_teacher_slots():
    response = client.post("/api/v1/timetables/auto-generate", json=get_ambiguous_request())

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["multiTeacherChoices"] == 2
    assert data["nextSteps"][0] == "Review multi-teacher selections"

    choices = data["result"]["multiTeacherSlots"]
    assert [c["timeSlotId"] for c in choices] == ["s1", "s3"]
    # Load-based tie-break alternates teachers
    assert choices[0]["chosen"] == "t1"
    assert choices[1]["chosen"] == "t2"
    assert sorted(choices[0]["candidates"]) == ["t1", "t2"]


def test_auto_generate_preserve_existing():
    request = get_minimal_request()
    request["existingTimetable"] = [{"subjectId": "math", "teacherId": "t1", "timeSlotId": "s1"}]
    request["preserveExisting"] = True

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 200
    data = response.json()
    assert [e["timeSlotId"] for e in data["result"]["timetable"]] == ["s3"]
    assert data["summary"]["preserveExisting"] is True


@pytest.mark.parametrize("field,value,missing_key", [
    ("subjects", [], "subjects"),
    ("teachers", [], "teachers"),
    ("teacherAssignments", [], "teacherAssignments"),
    ("teacherAvailability", [], "teacherAvailability"),
])
def test_missing_prerequisite_returns_400(field, value, missing_key):
    request = get_minimal_request()
    request[field] = value

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Cannot generate timetable"
    assert data["reason"]
    assert data["suggestions"]
    assert data["missingData"][missing_key] is True


def test_only_break_slots_returns_400():
    request = get_minimal_request()
    request["timeSlots"] = [slot for slot in request["timeSlots"] if slot["isBreak"]]

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 400
    assert response.json()["missingData"]["timeSlots"] is True


def test_validation_error_format():
    """Test that validation errors return human-friendly format."""
    # Missing required fields
    invalid_request = {
        "classId": "class-1",
        "subjects": [],
    }

    response = client.post("/api/v1/timetables/auto-generate", json=invalid_request)

    assert response.status_code == 422
    data = response.json()
    assert "errors" in data
    assert isinstance(data["errors"], dict)
    assert "academicYear" in data["errors"]

    for field, messages in data["errors"].items():
        assert isinstance(messages, list)
        assert len(messages) > 0
        assert isinstance(messages[0], str)


def test_slot_time_order_validation():
    """A slot with start >= end is rejected before scheduling."""
    request = get_minimal_request()
    request["timeSlots"][0]["startTime"] = "09:30"

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 422
    messages = [m for msgs in response.json()["errors"].values() for m in msgs]
    assert any("must be before end time" in m for m in messages)


def test_invalid_strategy_validation():
    request = get_minimal_request()
    request["strategy"] = "random"

    response = client.post("/api/v1/timetables/auto-generate", json=request)

    assert response.status_code == 422
    assert "strategy" in response.json()["errors"]


def test_resolve_selections_endpoint():
    generated = client.post("/api/v1/timetables/auto-generate", json=get_ambiguous_request()).json()
    result = generated["result"]

    response = client.post(
        "/api/v1/timetables/resolve-selections",
        json={"result": result, "selections": {"s1": "t2"}}
    )

    assert response.status_code == 200
    data = response.json()
    entry = next(e for e in data["timetable"] if e["timeSlotId"] == "s1")
    assert entry["teacherId"] == "t2"
    assert [c["timeSlotId"] for c in data["multiTeacherSlots"]] == ["s3"]
    assert data["statistics"] == result["statistics"]


def test_resolve_selections_rejects_non_candidate():
    generated = client.post("/api/v1/timetables/auto-generate", json=get_ambiguous_request()).json()

    response = client.post(
        "/api/v1/timetables/resolve-selections",
        json={"result": generated["result"], "selections": {"s1": "t9"}}
    )

    assert response.status_code == 400
    assert "not a candidate" in response.json()["detail"]
