from __future__ import annotations

from flask import Flask, request, send_file

from ..common.decorators import current_user_id, role_required
from ..common.responses import error, ok, server_error
from ..core.enums import Role
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .codec import decode_token_image, render_token_png


def register(app: Flask, container) -> None:
    service = container.qr_service

    @app.route("/api/attendance/qr/generate", methods=["POST"], endpoint="api_qr_generate")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_qr_generate():
        data = request.get_json(silent=True) or {}
        try:
            token = service.generate_token(
                teacher_id=current_user_id(),
                subject_id=data.get("subjectId", ""),
                subject_name=data.get("subjectName", ""),
                date=data.get("date", ""),
                time=data.get("time", ""),
            )
            return ok(token.to_dict())
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/qr/<token>/image", methods=["GET"], endpoint="api_qr_image")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_qr_image(token: str):
        """Projectable QR image for an issued token."""
        try:
            if service.store.get(token) is None:
                return error(NotFoundError("Unknown QR token"))
            return send_file(render_token_png(token), mimetype="image/png")
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/qr/check-in", methods=["POST"], endpoint="api_qr_check_in")
    @role_required(Role.STUDENT)
    def api_qr_check_in():
        data = request.get_json(silent=True) or {}
        token = (data.get("token") or "").strip()
        try:
            if not token:
                raise ValidationError("token is required")
            result = service.check_in(token, current_user_id())
            return ok(result.to_dict(), message=result.message)
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/qr/check-in/image", methods=["POST"], endpoint="api_qr_check_in_image")
    @role_required(Role.STUDENT)
    def api_qr_check_in_image():
        try:
            upload = request.files.get("image")
            if upload is None:
                raise ValidationError("image file is required")
            token = decode_token_image(upload.stream)
            if not token:
                raise ValidationError("No QR code found in the image")
            result = service.check_in(token, current_user_id())
            return ok(result.to_dict(), message=result.message)
        except DomainError as e:
            return error(e)
        except Exception as e:
            return server_error(e)
