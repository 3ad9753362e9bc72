#!/usr/bin/env python3
"""
Re-derive every loan status of a group from its repayments and report
integrity problems (orphaned repayments, unknown member references).
"""
import sys
import warnings
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from shg.core.config import settings
from shg.core.exceptions import DataIntegrityWarning
from shg.db.base import SessionLocal
from shg.services.loan import recompute_all_loans
from shg.services.store import list_members, list_transactions
from shg.services.summary import find_integrity_issues


def check_group(db, group_id):
    print(f"Checking loans of group {group_id}...")
    changes = recompute_all_loans(db, group_id)
    changed = [c for c in changes if c.changed]
    print(f"  {len(changes)} loan(s) checked, {len(changed)} status change(s)")
    for change in changed:
        label = "REOPENED" if change.reopened else change.status.value
        print(f"  - {change.loan_id}: {change.previous_status.value if change.previous_status else 'none'} -> {label}")

    issues = find_integrity_issues(list_transactions(db, group_id), list_members(db, group_id))
    if not issues:
        print("  No integrity issues found")
    for issue in issues:
        print(f"  ! {issue.kind}: {issue.message}")
    return issues


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Recompute loan statuses and report integrity issues")
    parser.add_argument("--group", default=settings.VIEWING_USER_ID, help="Group (viewing user) id to check")
    args = parser.parse_args()
    if not args.group:
        parser.error("--group is required when VIEWING_USER_ID is not set")

    # issues are printed below
    warnings.simplefilter("ignore", DataIntegrityWarning)

    db = SessionLocal()
    try:
        issues = check_group(db, args.group)
    finally:
        db.close()
    sys.exit(1 if issues else 0)
