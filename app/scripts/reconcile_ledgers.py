#!/usr/bin/env python3
"""
Reconcile Ledgers Script
Usage: python -m app.scripts.reconcile_ledgers [--fix]

Compares every proposal's stored amount_paid / commission_paid with the sum
of its payment ledger and lists the proposals that disagree.

With --fix the stored totals are rewritten from the ledgers. Payment entries
are never modified.
"""

import argparse
import sys

from app.database import SessionLocal, get_database_url
from app.models import Proposal
from app.services.payments import reconcile_proposal


def run(db, fix: bool = False) -> list:
    """Reconcile all proposals. Returns the reports of inconsistent ones."""
    drifted = []
    proposal_ids = [row[0] for row in db.query(Proposal.id).order_by(Proposal.id).all()]
    for proposal_id in proposal_ids:
        report = reconcile_proposal(db, proposal_id, fix=fix)
        if not report["consistent"]:
            drifted.append(report)
    return drifted


def main(argv=None):
    parser = argparse.ArgumentParser(description="Check paid totals against payment ledgers")
    parser.add_argument("--fix", action="store_true", help="rewrite drifted totals from the ledgers")
    args = parser.parse_args(argv)

    print(f"\n{'=' * 60}")
    print("LEDGER RECONCILIATION")
    print(f"{'=' * 60}")
    print(f"Database: {get_database_url()}\n")

    db = SessionLocal()
    try:
        drifted = run(db, fix=args.fix)

        if not drifted:
            print("All proposals match their ledgers.\n")
            return 0

        for report in drifted:
            print(f"Proposal {report['proposal_id']}:")
            for field, totals in report["totals"].items():
                if totals["stored"] != totals["ledger"]:
                    print(f"  {field}: stored {totals['stored']} / ledger {totals['ledger']}")

        if args.fix:
            print(f"\nRepaired {len(drifted)} proposal(s).\n")
            return 0
        print(f"\n{len(drifted)} proposal(s) out of balance. Re-run with --fix to repair.\n")
        return 1

    except Exception as e:
        print(f"ERROR: {e}")
        return 2
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
