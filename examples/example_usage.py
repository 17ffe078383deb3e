"""Example: use the service layer directly (no Flask).

Controllers are a thin layer; business rules live in the services.
"""

import importlib

from dotenv import load_dotenv

from tutortrack.attendance.model import record_to_dict
from tutortrack.config import get_settings_module
from tutortrack.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, student_name=getattr(settings, "STUDENT_NAME", None))

    listing = container.attendance_service.list_records()
    print(f"present this month: {listing.present_count}")
    for record in listing.records[:5]:
        print(record_to_dict(record))


if __name__ == "__main__":
    main()
