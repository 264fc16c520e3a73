"""Example: drive the service layer directly, without Flask.

Controllers are a thin layer; the quota and attendance rules live in services.
"""

import importlib

from config import get_settings_module

from src.school_attendance.school_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, sweep_interval_seconds=None)

    for record in container.attendance_service.list_records()[:5]:
        print(record.date, record.subject_name, len(record.students), "students")

    print(container.reconciliation_service.recalculate_quotas())


if __name__ == "__main__":
    main()
