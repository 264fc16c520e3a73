"""Run a reconciliation pass against the configured database.

    python scripts/reconcile.py recalculate
    python scripts/reconcile.py sanitize
    python scripts/reconcile.py recover --recalculate
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import click
from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.container import build_container


@click.command()
@click.argument("command", type=click.Choice(["recalculate", "sanitize", "recover"]))
@click.option("--recalculate", "then_recalculate", is_flag=True, help="After 'recover', also rebuild quotas.")
@click.option("--log-level", default=None, help="Override LOG_LEVEL from settings.")
def main(command: str, then_recalculate: bool, log_level: str | None) -> None:
    """Rebuild attendance quotas and records."""

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=log_level or getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG), sweep_interval_seconds=None)
    service = container.reconciliation_service

    if command == "recalculate":
        result = service.recalculate_quotas().to_dict()
    elif command == "sanitize":
        result = service.sanitize_system().to_dict()
    else:
        result = service.recover_history_from_profiles().to_dict()
        if then_recalculate:
            result["quotas"] = service.recalculate_quotas().to_dict()

    click.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
