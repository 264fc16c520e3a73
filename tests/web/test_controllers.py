import io
from datetime import date

import pytest

from src.school_attendance.school_attendance.container import wire
from src.school_attendance.school_attendance.main import create_app
from src.school_attendance.school_attendance.qr import controller as qr_controller
from src.school_attendance.school_attendance.qr.model import QrSession
from src.school_attendance.school_attendance.students.model import CourseRegistration, Student


@pytest.fixture
def container(students, subjects, attendance, sink):
    students.add(
        Student(
            student_id="s1",
            first_name="Somchai",
            last_name="Jaidee",
            courses=(CourseRegistration(subject="Web Design", teacher_id="T1", total_sessions=10, used_sessions=2),),
        )
    )
    return wire(
        students_repo=students,
        subjects_repo=subjects,
        attendance_repo=attendance,
        notifier=sink,
        sweep_interval_seconds=None,
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as s:
        s["user_id"] = user_id
        s["role"] = role


def _save(client, day="2026-03-02", status="Present"):
    return client.post(
        "/api/attendance",
        json={
            "subjectId": "sub-web",
            "subjectName": "Web Design",
            "date": day,
            "students": [{"studentId": "s1", "status": status}],
        },
    )


def test_requires_session(client):
    assert _save(client).status_code == 401


def test_student_cannot_save_attendance(client):
    _login(client, "s1", "student")

    resp = _save(client)

    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_teacher_saves_and_lists_attendance(client, students):
    _login(client, "T1", "teacher")

    resp = _save(client)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["teacherId"] == "T1"
    assert body["data"]["date"] == "2026-03-02"
    assert body["data"]["students"][0]["firstName"] == "Somchai"
    assert students.used("s1") == 3

    listed = client.get("/api/attendance/teacher").get_json()["data"]
    assert [r["id"] for r in listed] == [body["data"]["id"]]

    check = client.get("/api/attendance/check?subjectId=sub-web&date=2026-03-02").get_json()
    assert check["data"]["id"] == body["data"]["id"]
    assert client.get("/api/attendance/check?subjectId=sub-web&date=2026-03-05").get_json()["data"] is None


def test_invalid_status_is_400(client):
    _login(client, "T1", "teacher")

    assert _save(client, status="maybe").status_code == 400


def test_update_conflict_is_409(client):
    _login(client, "T1", "teacher")
    _save(client, day="2026-03-02")
    other = _save(client, day="2026-03-03").get_json()["data"]

    resp = client.patch(
        f"/api/attendance/{other['id']}",
        json={"subjectName": "Web Design", "date": "2026-03-02", "students": []},
    )

    assert resp.status_code == 409


def test_delete_missing_is_404_and_delete_rolls_back(client, students):
    _login(client, "T1", "teacher")
    assert client.delete("/api/attendance/nope").status_code == 404

    record = _save(client).get_json()["data"]
    assert client.delete(f"/api/attendance/{record['id']}?studentId=s1").status_code == 200
    assert students.used("s1") == 2


def test_batch_endpoint(client):
    _login(client, "T1", "teacher")

    resp = client.post(
        "/api/attendance/batch",
        json={"subject": "sub-web", "date": "2026-03-02", "records": [{"studentId": "s1", "status": "Late"}]},
    )

    assert resp.get_json()["data"] == {"updatedCount": 1, "errors": []}


def test_my_history_for_student(client):
    _login(client, "T1", "teacher")
    _save(client, status="Late")
    _login(client, "s1", "student")

    rows = client.get("/api/attendance/my-history").get_json()["data"]

    assert rows == [
        {
            "recordId": rows[0]["recordId"],
            "subjectName": "Web Design",
            "date": "2026-03-02",
            "status": "Late",
            "time": None,
            "comment": None,
        }
    ]


def test_qr_generate_image_and_check_in(client, students):
    _login(client, "T1", "teacher")
    token = client.post(
        "/api/attendance/qr/generate",
        json={"subjectId": "sub-web", "subjectName": "Web Design", "date": "2026-03-02", "time": "09:00"},
    ).get_json()["data"]["token"]

    image = client.get(f"/api/attendance/qr/{token}/image")
    assert image.status_code == 200
    assert image.mimetype == "image/png"
    assert client.get("/api/attendance/qr/unknown/image").status_code == 404

    _login(client, "s1", "student")
    first = client.post("/api/attendance/qr/check-in", json={"token": token}).get_json()
    second = client.post("/api/attendance/qr/check-in", json={"token": token}).get_json()

    assert first["data"]["status"] == "checked_in"
    assert first["data"]["quotaDeducted"] is True
    assert first["data"]["remainingQuota"] == 7
    assert second["data"]["status"] == "already_checked_in"
    assert students.used("s1") == 3


def test_qr_check_in_errors(client, container):
    container.qr_store.put(
        QrSession(
            token="stale",
            teacher_id="T1",
            subject_id="sub-web",
            subject_name="Web Design",
            date="2026-03-02",
            time="09:00",
            expires_at=0,
        )
    )
    _login(client, "s1", "student")

    assert client.post("/api/attendance/qr/check-in", json={"token": "stale"}).status_code == 410
    assert client.post("/api/attendance/qr/check-in", json={"token": "stale"}).status_code == 404
    assert client.post("/api/attendance/qr/check-in", json={}).status_code == 400


def test_qr_check_in_from_image(client, container, monkeypatch):
    token = container.qr_service.generate_token(
        teacher_id="T1", subject_id="sub-web", subject_name="Web Design", date=date.today().isoformat()
    ).token
    monkeypatch.setattr(qr_controller, "decode_token_image", lambda stream: token)
    _login(client, "s1", "student")

    resp = client.post(
        "/api/attendance/qr/check-in/image",
        data={"image": (io.BytesIO(b"not really a png"), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "checked_in"


def test_qr_image_without_code_is_400(client, monkeypatch):
    monkeypatch.setattr(qr_controller, "decode_token_image", lambda stream: None)
    _login(client, "s1", "student")

    resp = client.post(
        "/api/attendance/qr/check-in/image",
        data={"image": (io.BytesIO(b"blank"), "blank.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert client.post("/api/attendance/qr/check-in/image", data={}).status_code == 400


def test_reconciliation_endpoints_roles(client, students):
    _login(client, "T1", "teacher")
    _save(client)

    synced = client.post("/api/attendance/sync-quotas").get_json()
    assert synced["data"] == {"updatedCount": 1, "failCount": 0}
    assert students.used("s1") == 1

    assert client.post("/api/attendance/sanitize").status_code == 403
    _login(client, "A1", "admin")
    assert client.post("/api/attendance/sanitize").get_json()["data"]["cleanedRecords"] == 0
    assert client.post("/api/attendance/recover-history").get_json()["data"] == {"createdCount": 0, "updatedCount": 0}


def test_extend_course_endpoint(client):
    _login(client, "A1", "admin")

    resp = client.post(
        "/api/students/s1/courses/0/extend",
        json={"newEndDate": "2026-06-30", "sessionsAdded": 4, "note": "summer"},
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["totalSessions"] == 14
    assert data["endDate"] == "2026-06-30"
    assert client.post("/api/students/s1/courses/5/extend", json={"newEndDate": "2026-06-30"}).status_code == 404
