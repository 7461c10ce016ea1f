"""
Script to rewrite legacy order statuses (received, shipped) to their current names.

Safe to run more than once.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.db.database import SessionLocal
from app.services.status_tracker import normalize_legacy_statuses


def migrate_legacy_statuses():
    db = SessionLocal()
    try:
        counts = normalize_legacy_statuses(db)
        print(f"Orders updated: {counts['orders']}")
        print(f"History rows updated: previous={counts['history_previous']} new={counts['history_new']}")
    finally:
        db.close()


if __name__ == "__main__":
    migrate_legacy_statuses()
