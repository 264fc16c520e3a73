from __future__ import annotations

from flask import Flask, request, session

from ..common.decorators import current_user_id, role_required
from ..common.responses import error, ok, server_error
from ..core.enums import Role
from ..core.exceptions import DomainError


def _acting_teacher_id(data: dict) -> str:
    # Admins may act on behalf of a teacher; teachers always act as themselves.
    if session.get("role") == Role.ADMIN.value and data.get("teacherId"):
        return str(data["teacherId"])
    return current_user_id()


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_save")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_save():
        data = request.get_json(silent=True) or {}
        try:
            record = service.create_or_update_attendance(
                teacher_id=_acting_teacher_id(data),
                subject_id=data.get("subjectId", ""),
                subject_name=data.get("subjectName", ""),
                date=data.get("date", ""),
                students=data.get("students") or [],
            )
            return ok(record.to_dict(), message="Attendance saved")
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/teacher", methods=["GET"], endpoint="api_attendance_teacher")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_teacher():
        try:
            records = service.list_for_teacher(current_user_id())
            return ok([r.to_dict() for r in records])
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/check", methods=["GET"], endpoint="api_attendance_check")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_check():
        try:
            record = service.find_by_subject_and_date(
                request.args.get("subjectId", ""),
                request.args.get("date", ""),
            )
            return ok(record.to_dict() if record else None)
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/all", methods=["GET"], endpoint="api_attendance_all")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_all():
        try:
            records = service.list_records(
                subject=request.args.get("subject"),
                teacher_id=request.args.get("teacherId"),
            )
            return ok([r.to_dict() for r in records])
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/my-history", methods=["GET"], endpoint="api_attendance_my_history")
    @role_required(Role.STUDENT)
    def api_attendance_my_history():
        try:
            sid = current_user_id()
            rows = []
            for record in service.history_for_student(sid):
                entry = record.find_entry(sid)
                rows.append(
                    {
                        "recordId": record.record_id,
                        "subjectName": record.subject_name,
                        "date": record.date.strftime("%Y-%m-%d"),
                        "status": entry.status if entry else None,
                        "time": entry.time if entry else None,
                        "comment": entry.comment if entry else None,
                    }
                )
            return ok(rows)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/<record_id>", methods=["PATCH"], endpoint="api_attendance_update")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_update(record_id: str):
        data = request.get_json(silent=True) or {}
        try:
            record = service.update_attendance(
                record_id,
                teacher_id=_acting_teacher_id(data),
                subject_name=data.get("subjectName", ""),
                date=data.get("date", ""),
                students=data.get("students") or [],
            )
            return ok(record.to_dict(), message="Attendance updated")
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/<record_id>", methods=["DELETE"], endpoint="api_attendance_delete")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_delete(record_id: str):
        try:
            service.delete_attendance(record_id, student_id=request.args.get("studentId") or None)
            return ok(message="Attendance deleted")
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/batch", methods=["POST"], endpoint="api_attendance_batch")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_attendance_batch():
        data = request.get_json(silent=True) or {}
        try:
            result = service.record_batch(
                subject=data.get("subject") or data.get("subjectId") or "",
                teacher_id=_acting_teacher_id(data),
                date=data.get("date", ""),
                records=data.get("records") or [],
            )
            return ok({"updatedCount": result.updated_count, "errors": result.errors})
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)
