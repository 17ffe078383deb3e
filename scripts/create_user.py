"""Create (or reset the password of) a tutor account.

Usage: python scripts/create_user.py EMAIL PASSWORD [NAME]
"""

from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from tutortrack.config import get_settings_module
from tutortrack.container import build_container
from tutortrack.core.enums import Role
from tutortrack.core.exceptions import ValidationError


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    parser = argparse.ArgumentParser(description="Create a TutorTrack sign-in account")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("name", nargs="?", default="Tutor")
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.TUTOR.value)
    parser.add_argument("--reset-password", action="store_true", help="update the password of an existing user")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), student_name=getattr(settings, "STUDENT_NAME", None))
    container.schema_initializer.initialize()

    try:
        if args.reset_password:
            container.user_service.change_password(email=args.email, password=args.password)
            print(f"OK: Password updated for {args.email}")
        else:
            user_id = container.user_service.create_user(
                email=args.email,
                password=args.password,
                name=args.name,
                role=Role(args.role),
            )
            print(f"OK: Created user {args.email} (id={user_id})")
    except ValidationError as e:
        raise SystemExit(f"ERROR: {e}")


if __name__ == "__main__":
    main()
