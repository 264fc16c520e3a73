from datetime import date

import pytest

from src.school_attendance.school_attendance.core.exceptions import NotFoundError, ValidationError
from src.school_attendance.school_attendance.students.model import CourseRegistration, Student
from src.school_attendance.school_attendance.students.service import StudentService, registration_to_dict


@pytest.fixture
def service(students, clock):
    students.add(
        Student(
            student_id="s1",
            courses=(
                CourseRegistration(subject="Math", total_sessions=10, used_sessions=10, end_date=date(2026, 3, 31)),
            ),
        )
    )
    return StudentService(students, clock=clock)


def test_extend_course_adds_sessions_and_history(service, students, clock):
    course = service.extend_course("s1", 0, new_end_date="2026-04-30", sessions_added=5, note="Term 2")

    assert course.total_sessions == 15
    assert course.end_date == date(2026, 4, 30)
    assert course.remaining_sessions == 5
    (ext,) = course.extension_history
    assert ext.previous_end_date == date(2026, 3, 31)
    assert ext.new_end_date == date(2026, 4, 30)
    assert ext.sessions_added == 5
    assert ext.extended_at == clock.now
    assert students.get_by_id("s1").courses[0] == course

    again = service.extend_course("s1", 0, new_end_date="2026-05-31", sessions_added=0)
    assert len(again.extension_history) == 2
    assert again.extension_history[1].previous_end_date == date(2026, 4, 30)
    assert registration_to_dict(again)["extensionHistory"][1]["newEndDate"] == "2026-05-31"


def test_extend_course_errors(service):
    with pytest.raises(NotFoundError):
        service.extend_course("ghost", 0, new_end_date="2026-04-30")
    with pytest.raises(NotFoundError):
        service.extend_course("s1", 3, new_end_date="2026-04-30")
    with pytest.raises(ValidationError):
        service.extend_course("s1", 0, new_end_date="2026-04-30", sessions_added=-1)
    with pytest.raises(ValidationError):
        service.extend_course("s1", 0, new_end_date="someday")
