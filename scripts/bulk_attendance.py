"""Import attendance rows from a CSV file.

Columns: date,status,topic,start_time,end_time (header required; status
defaults to Present). Rows go through the normal service, so the monthly
present cap and upsert-by-date apply.

Usage: python scripts/bulk_attendance.py rows.csv
"""

from __future__ import annotations

import argparse
import importlib
import logging

import pandas as pd
from dotenv import load_dotenv

from tutortrack.config import get_settings_module
from tutortrack.container import build_container
from tutortrack.core.exceptions import ValidationError


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    parser = argparse.ArgumentParser(description="Bulk-import attendance from CSV")
    parser.add_argument("csv_path")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), student_name=getattr(settings, "STUDENT_NAME", None))
    container.schema_initializer.initialize()

    df = pd.read_csv(args.csv_path, dtype=str, keep_default_na=False)

    saved = 0
    failed = 0
    for row in df.to_dict(orient="records"):
        try:
            record = container.attendance_service.record_for_date(
                attendance_date=row.get("date"),
                status=row.get("status") or "Present",
                topic=row.get("topic"),
                start_time=row.get("start_time"),
                end_time=row.get("end_time"),
            )
            saved += 1
            print(f"OK: {record.attendance_date} {record.status.value} {record.topic or ''}")
        except ValidationError as e:
            failed += 1
            print(f"SKIP: {row.get('date')}: {e}")

    print(f"Done: saved={saved} skipped={failed}")


if __name__ == "__main__":
    main()
