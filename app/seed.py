#!/usr/bin/env python3
"""
Database Seeding for Proposal Commissions

Usage:
    python -m app.seed              # Default service-type catalog only
    SEED_SAMPLE_DATA=true python -m app.seed   # Also sample proposals and partners

Behavior:
    - Service types: created only when the catalog is empty
    - Sample proposals: created only when no proposals exist; amounts already
      paid are recorded as ledger entries so paid totals match their ledgers
    - Sample partners: created only when missing (matched by username)
    - Safe to run multiple times (idempotent)
"""

import os
from datetime import date

from app.database import SessionLocal, init_db
from app.models import Partner, Proposal
from app.services.partners import create_partner
from app.services.payments import PaymentKind, add_payment
from app.services.proposals import create_proposal
from app.services.service_types import ensure_default_service_types


# =============================================================================
# SAMPLE DATA
# =============================================================================

SAMPLE_PROPOSALS = [
    {
        "proposal": {
            "name": "264.24 – Orlando",
            "client_name": "Orlando",
            "client_type": "Commercial",
            "proposal_date": date(2024, 3, 4),
            "project_type": "PE",
            "total_value": "24500",
            "commission_percent": "10",
            "service_types": ["Steel Structure", "Metal Roofing"],
        },
        "paid": "12250",
        "commission_paid": "1225",
    },
    {
        "proposal": {
            "name": "192.18 – Maria Alice",
            "client_name": "Maria Alice",
            "client_type": "Residential",
            "proposal_date": date(2024, 1, 22),
            "project_type": "None",
            "total_value": "18750",
            "commission_percent": "12",
            "service_types": ["Mezzanine"],
            "repeat_client": True,
        },
        "paid": "18750",
        "commission_paid": "2250",
    },
    {
        "proposal": {
            "name": "305.32 – Pedro Souza",
            "client_name": "Pedro Souza",
            "client_type": "Industrial",
            "proposal_date": date(2024, 5, 15),
            "project_type": "PE + PC",
            "total_value": "42800",
            "commission_percent": "15",
            "service_types": ["Steel Structure", "Side Cladding", "Installation"],
        },
        "paid": "21400",
        "commission_paid": "3210",
    },
    {
        "proposal": {
            "name": "178.09 – Alexandre Lima",
            "client_name": "Alexandre Lima",
            "client_type": "Agribusiness",
            "proposal_date": date(2024, 6, 3),
            "project_type": "PE",
            "total_value": "15300",
            "commission_percent": "8",
            "service_types": ["Steel Structure"],
        },
        "paid": "0",
        "commission_paid": "0",
    },
]

# Partner -> indexes into SAMPLE_PROPOSALS
SAMPLE_PARTNERS = [
    {
        "name": "Partner 1",
        "username": "partner1",
        "email": "partner1@example.com",
        "password": "change-me-1",
        "proposals": [0, 1],
    },
    {
        "name": "Partner 2",
        "username": "partner2",
        "email": "partner2@example.com",
        "password": "change-me-2",
        "proposals": [2],
    },
]


# =============================================================================
# SEEDING FUNCTIONS
# =============================================================================


def seed_proposals(db) -> list:
    """
    Create the sample proposals if the table is empty.
    Returns the created proposals (empty list when skipped).
    """
    proposal_count = db.query(Proposal).count()
    if proposal_count > 0:
        print(f"  [SKIP] {proposal_count} proposal(s) already exist")
        return []

    created = []
    for sample in SAMPLE_PROPOSALS:
        proposal = create_proposal(db, sample["proposal"])
        print(f"  [CREATE] Proposal: {proposal.name}")
        payment_date = proposal.proposal_date
        if sample["paid"] != "0":
            add_payment(db, proposal.id, PaymentKind.CLIENT, sample["paid"], payment_date,
                        "Opening balance")
        if sample["commission_paid"] != "0":
            add_payment(db, proposal.id, PaymentKind.COMMISSION, sample["commission_paid"],
                        payment_date, "Opening balance")
        created.append(proposal)
    return created


def seed_partners(db, proposals: list) -> int:
    """
    Create sample partners that don't exist yet.
    Returns count of partners created.
    """
    created_count = 0
    for sample in SAMPLE_PARTNERS:
        if db.query(Partner).filter(Partner.username == sample["username"]).first():
            print(f"  [SKIP] Partner exists: {sample['username']}")
            continue
        proposal_ids = [proposals[i].id for i in sample["proposals"] if i < len(proposals)]
        create_partner(db, {
            "name": sample["name"],
            "username": sample["username"],
            "email": sample["email"],
            "password": sample["password"],
            "proposal_ids": proposal_ids,
        })
        print(f"  [CREATE] Partner: {sample['username']}")
        created_count += 1
    return created_count


def seed_sample_data(db) -> dict:
    """Seed catalog, proposals and partners. Returns counts of created rows."""
    service_types = ensure_default_service_types(db)
    proposals = seed_proposals(db)
    partners = seed_partners(db, proposals)
    return {
        "service_types": service_types,
        "proposals": len(proposals),
        "partners": partners,
    }


def main():
    """Main seeding entry point."""
    print("=" * 60)
    print("PROPOSAL COMMISSIONS - DATABASE SEEDING")
    print("=" * 60)

    seed_sample = os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"

    init_db()
    db = SessionLocal()
    try:
        if seed_sample:
            print("Mode: SEED_SAMPLE_DATA=true (catalog, proposals and partners)\n")
            counts = seed_sample_data(db)
        else:
            print("Mode: Standard (service-type catalog only)\n")
            counts = {"service_types": ensure_default_service_types(db)}

        print("\n" + "=" * 60)
        print("SEEDING COMPLETE")
        print("=" * 60)
        for name, count in counts.items():
            print(f"Created {count} {name.replace('_', ' ')}")

    except Exception as e:
        db.rollback()
        print(f"\n[ERROR] Seeding failed: {e}")
        raise

    finally:
        db.close()


if __name__ == "__main__":
    main()
