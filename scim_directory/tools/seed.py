#!/usr/bin/env python3
"""
Seed the directory with an organisation and a bearer token.

Usage:
    scim-directory-seed --name "Test Organisation" --token tok-A

The token value is chosen by the operator; this command only binds it to the
new organisation. The database is taken from DATABASE_URL unless
--database-url is given.
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..config import get_settings
from ..services.user_store import DirectoryStore, StoreError

logger = logging.getLogger(__name__)


def seed(store: DirectoryStore, name: str, token: str) -> str:
    """
    Create an organisation and bind a token to it.

    Args:
        store: Target store (tables are created if missing)
        name: Organisation name
        token: Bearer token to bind

    Returns:
        str: Id of the new organisation
    """
    store.create_schema()
    organisation = store.create_organisation(name)
    store.create_organisation_token(organisation.id, token)
    logger.info(f"Seeded organisation {organisation.id} ({name!r})")
    return organisation.id


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed an organisation and bearer token")
    parser.add_argument("--name", default="Test Organisation", help="Organisation name")
    parser.add_argument("--token", required=True, help="Bearer token to bind to the organisation")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    database_url = args.database_url or get_settings().database_url
    try:
        organisation_id = seed(DirectoryStore.from_url(database_url), args.name, args.token)
    except StoreError as e:
        logger.error(f"Seeding failed: {e}")
        return 1

    print(f"Seeding completed: organisation {organisation_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
