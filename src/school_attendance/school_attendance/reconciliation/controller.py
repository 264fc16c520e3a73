from __future__ import annotations

from flask import Flask

from ..common.decorators import role_required
from ..common.responses import ok, server_error
from ..core.enums import Role


def register(app: Flask, container) -> None:
    service = container.reconciliation_service

    @app.route("/api/attendance/sync-quotas", methods=["POST"], endpoint="api_sync_quotas")
    @role_required(Role.ADMIN, Role.TEACHER)
    def api_sync_quotas():
        try:
            return ok(service.recalculate_quotas().to_dict(), message="Quotas recalculated")
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/sanitize", methods=["POST"], endpoint="api_sanitize")
    @role_required(Role.ADMIN)
    def api_sanitize():
        try:
            return ok(service.sanitize_system().to_dict(), message="Sanitize complete")
        except Exception as e:
            return server_error(e)

    @app.route("/api/attendance/recover-history", methods=["POST"], endpoint="api_recover_history")
    @role_required(Role.ADMIN)
    def api_recover_history():
        try:
            return ok(service.recover_history_from_profiles().to_dict(), message="Recovery complete")
        except Exception as e:
            return server_error(e)
