from __future__ import annotations

from flask import Flask, request

from ..common.decorators import role_required
from ..common.responses import error, ok, server_error
from ..core.enums import Role
from ..core.exceptions import DomainError
from .service import registration_to_dict


def register(app: Flask, container) -> None:
    service = container.student_service

    @app.route(
        "/api/students/<student_id>/courses/<int:course_index>/extend",
        methods=["POST"],
        endpoint="api_extend_course",
    )
    @role_required(Role.ADMIN)
    def api_extend_course(student_id: str, course_index: int):
        data = request.get_json(silent=True) or {}
        try:
            course = service.extend_course(
                student_id,
                course_index,
                new_end_date=data.get("newEndDate", ""),
                sessions_added=data.get("sessionsAdded", 0),
                note=data.get("note", ""),
            )
            return ok(registration_to_dict(course), message="Course extended")
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)
