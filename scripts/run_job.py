"""Run one shift job by hand, e.g. after the server was down at trigger time.

    python scripts/run_job.py seed
    python scripts/run_job.py finalize --at 2025-01-02T06:30:00+05:00
"""

from __future__ import annotations

import argparse
import importlib
import json

from dotenv import load_dotenv

from night_attendance.common.datetime_utils import parse_iso_datetime
from night_attendance.config import get_settings_module
from night_attendance.config.config import load_shift_settings
from night_attendance.container import build_container
from night_attendance.main import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a shift job once")
    parser.add_argument("job", choices=["seed", "finalize"])
    parser.add_argument("--at", help="trigger instant (ISO-8601), defaults to now")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), shift_settings=load_shift_settings(settings))
    trigger = parse_iso_datetime(args.at) if args.at else None

    if args.job == "seed":
        result = container.scheduler.run_seeding(trigger)
    else:
        result = container.scheduler.run_finalization(trigger)
    print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
