from datetime import date

from src.school_attendance.school_attendance.attendance.model import AttendanceEntry, AttendanceRecord
from src.school_attendance.school_attendance.reconciliation.service import sanitize_record
from src.school_attendance.school_attendance.students.model import CourseRegistration, HistoryEntry, Student

D1 = date(2026, 3, 2)
D2 = date(2026, 3, 3)


def _record(attendance, subject_id, subject_name, day, *entries, teacher_id="T1"):
    return attendance.create(
        AttendanceRecord(
            record_id="",
            subject_id=subject_id,
            subject_name=subject_name,
            teacher_id=teacher_id,
            date=day,
            students=tuple(AttendanceEntry(student_id=sid, first_name="F", last_name="L", status=st) for sid, st in entries),
        )
    )


def _seed(students, attendance):
    students.add(
        Student(
            student_id="s1",
            courses=(CourseRegistration(subject="Web Design", teacher_id="T1", total_sessions=10, used_sessions=7),),
        )
    )
    students.add(Student(student_id="s2", courses=(CourseRegistration(subject="Math", total_sessions=10, used_sessions=3),)))
    _record(attendance, "sub-web", "Web Design", D1, ("s1", "Present"), ("s2", "Absent"), ("ghost", "Present"))
    _record(attendance, "sub-web", "Web Design", D2, ("s1", "มาสาย"))
    _record(attendance, "sub-math", "Math", D1, ("s2", "Late"))
    _record(attendance, "sub-phy", "Physics", D1, ("s1", "Present"))


def test_recalculate_rebuilds_used_sessions(reconciliation_service, students, attendance):
    _seed(students, attendance)

    result = reconciliation_service.recalculate_quotas()

    assert students.used("s1") == 2
    assert students.used("s2") == 1
    assert result.updated_count == 3
    assert result.fail_count == 2
    assert result.to_dict() == {"updatedCount": 3, "failCount": 2}


def test_recalculate_resets_only_students_that_changed(reconciliation_service, students, attendance):
    students.add(Student(student_id="s1", courses=(CourseRegistration(subject="Math", used_sessions=0),)))
    students.add(Student(student_id="s2", courses=(CourseRegistration(subject="Math", used_sessions=4),)))

    reconciliation_service.recalculate_quotas()

    assert students.saves == 1
    assert students.used("s2") == 0


def test_recalculate_ignores_teacher_ids(reconciliation_service, students, attendance):
    students.add(
        Student(
            student_id="s1",
            courses=(
                CourseRegistration(subject="Web Design", teacher_id="T2", total_sessions=10),
                CourseRegistration(subject="Web Design", teacher_id="T1", total_sessions=10),
            ),
        )
    )
    _record(attendance, "sub-web", "Web Design", D1, ("s1", "Present"), teacher_id="T1")

    reconciliation_service.recalculate_quotas()

    assert students.used("s1", 0) == 1
    assert students.used("s1", 1) == 0


def test_sanitize_record_cleans_names_ids_and_statuses():
    record = AttendanceRecord(
        record_id="r1",
        subject_id="sub-web",
        subject_name="  Web Design ",
        teacher_id="T1",
        date=D1,
        students=(
            AttendanceEntry(student_id=" s1", status="มาเรียน"),
            AttendanceEntry(student_id="s2", status="present"),
            AttendanceEntry(student_id="s3", status="Absent"),
            AttendanceEntry(student_id="s4", status="half DAY"),
        ),
    )

    cleaned = sanitize_record(record)

    assert cleaned.subject_name == "Web Design"
    assert [e.student_id for e in cleaned.students] == ["s1", "s2", "s3", "s4"]
    assert [e.status for e in cleaned.students] == ["Present", "Present", "Absent", "Half day"]
    assert sanitize_record(cleaned) is None


def test_sanitize_twice_gives_the_same_result(reconciliation_service, students, attendance):
    _seed(students, attendance)
    _record(attendance, "sub-web", " Web Design ", date(2026, 3, 4), ("s1", "present"))

    first = reconciliation_service.sanitize_system()
    used_after_first = {sid: s.courses[0].used_sessions for sid, s in students.by_id.items()}
    saves_after_first = attendance.saves
    second = reconciliation_service.sanitize_system()

    assert first.cleaned_records == 2
    assert second.cleaned_records == 0
    assert attendance.saves == saves_after_first
    assert (first.updated_count, first.fail_count) == (second.updated_count, second.fail_count)
    assert {sid: s.courses[0].used_sessions for sid, s in students.by_id.items()} == used_after_first
    assert students.used("s1") == 3
    assert {e.status for r in attendance.list_all() for e in r.students} <= {"Present", "Late", "Absent"}


def test_recover_history_from_profiles(reconciliation_service, students, attendance):
    students.add(
        Student(
            student_id="s1",
            first_name="Somchai",
            last_name="Jaidee",
            courses=(
                CourseRegistration(
                    subject="Web Design",
                    teacher_id="T1",
                    used_sessions=2,
                    attendance_history=(
                        HistoryEntry(date=D1, status="present", note="old sheet", check_in_time="08:55"),
                        HistoryEntry(date=D2, status="late"),
                    ),
                ),
            ),
        )
    )
    existing = _record(attendance, "sub-web", "Web Design", D1, ("s2", "Absent"))

    result = reconciliation_service.recover_history_from_profiles()

    assert (result.created_count, result.updated_count) == (1, 1)
    joined = attendance.get_by_id(existing.record_id).find_entry("s1")
    assert (joined.status, joined.time, joined.comment) == ("Present", "08:55", "old sheet")

    created = attendance.find_for_subject_and_date("sub-web", D2)
    assert created.teacher_id == "T1"
    assert created.find_entry("s1").status == "Late"
    assert created.find_entry("s1").time == "00:00"

    assert students.partial_updates == 0
    assert students.used("s1") == 2

    again = reconciliation_service.recover_history_from_profiles()
    assert (again.created_count, again.updated_count) == (0, 0)


def test_recover_generates_ids_for_unknown_subjects(reconciliation_service, students, attendance):
    students.add(
        Student(
            student_id="s1",
            student_name="Niran Dee",
            courses=(CourseRegistration(subject="Robotics", attendance_history=(HistoryEntry(date=D1, status="ขาด"),)),),
        )
    )

    reconciliation_service.recover_history_from_profiles()

    (record,) = attendance.list_all()
    assert record.subject_name == "Robotics"
    assert len(record.subject_id) == 32
    assert len(record.teacher_id) == 32
    entry = record.find_entry("s1")
    assert (entry.first_name, entry.last_name, entry.status) == ("Niran", "Dee", "Absent")


def test_recover_fills_placeholder_names_for_nameless_students(reconciliation_service, students, attendance):
    students.add(
        Student(
            student_id="s1",
            courses=(CourseRegistration(subject="Robotics", attendance_history=(HistoryEntry(date=D1, status="present"),)),),
        )
    )

    reconciliation_service.recover_history_from_profiles()

    (record,) = attendance.list_all()
    entry = record.find_entry("s1")
    assert (entry.first_name, entry.last_name, entry.nickname) == ("Unknown", "Unknown", "-")
