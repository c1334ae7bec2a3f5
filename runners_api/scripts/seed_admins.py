"""
Seed admin accounts from an operator-supplied JSON file. Run from project root:
  python -m runners_api.scripts.seed_admins accounts.json

accounts.json is a list of objects with email, password, firstName, lastName
(optional organization, title). Existing emails are skipped, so re-running is safe.
Keep the file out of version control.
"""
import argparse
import json
import logging
import sys

from pydantic import ValidationError

from runners_api.core.database import SessionLocal
from runners_api.schemas.auth import RegisterRequest
from runners_api.services.admin import seed_admins

logger = logging.getLogger(__name__)


def load_accounts(path: str) -> list[dict]:
    """Read and validate the accounts file. Raises ValueError describing the first bad entry."""
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError("accounts file must contain a JSON array")
    accounts = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ValueError(f"entry {index} must be an object")
        try:
            checked = RegisterRequest.model_validate({**entry, "role": "admin"})
        except ValidationError as e:
            raise ValueError(f"entry {index} ({entry.get('email', '?')}): {e.errors()[0]['msg']}") from e
        accounts.append(
            {
                "email": checked.email,
                "password": checked.password,
                "firstName": checked.first_name,
                "lastName": checked.last_name,
                "organization": checked.organization,
                "title": checked.title,
            }
        )
    return accounts


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed admin accounts (idempotent).")
    parser.add_argument("accounts_file", help="Path to a JSON array of admin accounts")
    args = parser.parse_args(argv)

    try:
        accounts = load_accounts(args.accounts_file)
    except (OSError, ValueError) as e:
        print(f"Cannot load accounts: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        created, skipped = seed_admins(db, accounts)
    finally:
        db.close()
    for email in created:
        print(f"Created admin '{email}'.")
    for email in skipped:
        print(f"Skipped '{email}' (already exists).")
    logger.info("Admin seeding finished", extra={"admins_created": len(created), "admins_skipped": len(skipped)})
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    sys.exit(main())
