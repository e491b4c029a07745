# headpress/scripts/create_admin.py
import argparse
import logging
import os
import sys

from headpress.crud.crud_user import create_user, get_user_by_email, get_user_by_username
from headpress.db import models_registry  # noqa: F401
from headpress.db.session import SessionLocal
from headpress.models.user import UserRole
from headpress.schemas.user import UserCreate

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an administrator account.")
    parser.add_argument("--username", default=os.environ.get("ADMIN_USERNAME", "admin"))
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.password:
        logger.error("No password given; pass --password or set ADMIN_PASSWORD.")
        return 1

    logger.info("Creating administrator account...")
    db = SessionLocal()
    try:
        if get_user_by_username(db, args.username) or get_user_by_email(db, args.email):
            logger.info(f"User '{args.username}' already exists.")
            return 0
        user_in = UserCreate(username=args.username, email=args.email, password=args.password)
        create_user(db, user_in, role=UserRole.administrator.value)
        logger.info(f"Administrator '{args.username}' created.")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
