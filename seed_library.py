#!/usr/bin/env python3
"""
Fill a Library API database with demo books, members and one loan.

Usage:
    python seed_library.py --db ./library.db
"""

import argparse
import asyncio
import os
import sys

from library_api.app.core.config import Settings
from library_api.app.core.db import DocumentStore
from library_api.app.core.errors import LibraryError
from library_api.app.core.logging_config import setup_logging
from library_api.app.seed import seed_demo_data
from library_api.app.services.library_app import build_library_app


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the library database with demo data.")
    ap.add_argument("--db", default=None, help="Path to SQLite DB file (defaults to DATABASE_URL)")
    args = ap.parse_args()

    settings = Settings()
    if args.db:
        settings.database_url = os.path.abspath(args.db)
    setup_logging(settings.log_level)

    store = DocumentStore(settings.database_url)
    store.init_db()
    library = build_library_app(settings, store=store)
    try:
        counts = asyncio.run(seed_demo_data(library))
    except LibraryError as e:
        print(f"[!] {e}", file=sys.stderr)
        sys.exit(1)
    print(f"[+] Seeded {counts['books']} books, {counts['members']} members, {counts['loans']} loan")


if __name__ == "__main__":
    main()
