#!/usr/bin/env python3
"""
Seed the stub marketplace catalogue from a JSON file.

The file may be a list of products or an object with a `products` key.
Without --file the built-in garden catalogue is written.

Usage:
    python scripts/seed_products.py --file catalogue.json
"""
import argparse
import json

from gardencart.config import settings
from gardencart.db import init_db, make_engine, make_session_factory
from gardencart.server.catalogue import DEFAULT_CATALOGUE, seed_catalogue


def load_entries(path):
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("products") or data.get("items") or []
    return data


def main():
    parser = argparse.ArgumentParser(description="Seed stub catalogue products.")
    parser.add_argument("--file", help="JSON catalogue to load")
    parser.add_argument("--db", default=settings.DATABASE_URL, help="database URL")
    args = parser.parse_args()

    entries = load_entries(args.file) if args.file else DEFAULT_CATALOGUE
    engine = make_engine(args.db)
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        n = seed_catalogue(db, entries)
    finally:
        db.close()
    print(f"Seeded {n} products into {args.db}")


if __name__ == "__main__":
    main()
