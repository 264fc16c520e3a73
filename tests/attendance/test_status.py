import pytest

from src.school_attendance.school_attendance.attendance.status import is_deductible, normalize_status, status_delta
from src.school_attendance.school_attendance.core.enums import AttendanceStatus


@pytest.mark.parametrize("value", ["Present", "late", "LATE", " present ", "มาเรียน", "มาสาย", AttendanceStatus.LATE])
def test_deductible_statuses(value):
    assert is_deductible(value)


@pytest.mark.parametrize("value", ["Absent", "leave", "Sick", "ขาด", "ลา", "ลาป่วย", "", None, "Excused"])
def test_non_deductible_statuses(value):
    assert not is_deductible(value)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("มาเรียน", "Present"),
        ("present", "Present"),
        ("มาสาย", "Late"),
        ("ขาด", "Absent"),
        ("ลา", "Leave"),
        ("ลาป่วย", "Sick"),
        ("SICK", "Sick"),
        ("excused EARLY", "Excused early"),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_normalize_status_is_stable():
    for raw in ["มาสาย", "weird Thing", "Absent"]:
        once = normalize_status(raw)
        assert normalize_status(once) == once


def test_status_delta():
    assert status_delta(None, "Present") == 1
    assert status_delta("Absent", "Late") == 1
    assert status_delta("Present", "Absent") == -1
    assert status_delta("Present", None) == -1
    assert status_delta("Late", "Present") == 0
    assert status_delta("Absent", "Leave") == 0
    assert status_delta(None, "Absent") == 0
