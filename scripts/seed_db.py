"""Seed script to populate the database with sample complaints.

Usage:
    python scripts/seed_db.py            # Run interactive (asks before seeding)
    python scripts/seed_db.py --yes      # Seed without confirmation

Complaints go through the real submission pipeline, so each one gets a
complaint code, is auto-routed where its issue type has an authority, and
receives its three lifecycle notifications straight away.

Idempotency:
    - Sample complaints are only created if the complaints table is empty

Environment:
    Ensure database settings are correctly loaded via `.env` before running.
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from nagrik.core.components import build_components
from nagrik.core.database import async_engine, init_db
from nagrik.schemas.complaint import ComplaintForm


SAMPLE_COMPLAINTS = [
    ComplaintForm(
        state="Delhi", city="Delhi", district="South Delhi",
        address_line1="Block C, Lajpat Nagar",
        issue_type="electricity", description="No power since morning, transformer sparking",
    ),
    ComplaintForm(
        state="Maharashtra", city="Pune", district="Kothrud",
        address_line1="Paud Road, near bus depot",
        issue_type="pothole", description="Deep pothole in the left lane causing bike accidents",
    ),
    ComplaintForm(
        state="Karnataka", city="Bengaluru", district="Indiranagar",
        address_line1="100 Feet Road",
        issue_type="garbage", description="Garbage not collected for a week, bins overflowing",
    ),
    ComplaintForm(
        state="Uttar Pradesh", city="Lucknow", district="Gomti Nagar",
        issue_type="streetlight", description="Three street lights out on the main road",
    ),
    ComplaintForm(
        state="Tamil Nadu", city="Chennai", district="Adyar",
        issue_type="drainage", description="Storm drain blocked, water logging after rain",
    ),
    ComplaintForm(
        state="Rajasthan", city="Jaipur",
        issue_type="noise", description="Loudspeakers past midnight every weekend",
    ),
    ComplaintForm(
        state="West Bengal", city="Kolkata", district="Salt Lake",
        issue_type="others", description="Stray cattle blocking the lane near the market",
    ),
]


async def seed_complaints(confirm: bool = True):
    if confirm:
        resp = input("Proceed with seeding sample data? (y/n): ").strip().lower()
        if resp not in {"y", "yes"}:
            print("Aborted by user.")
            return

    print("Initializing database (tables)...")
    await init_db()

    components = build_components(acknowledgement_delay=0, resolution_delay=0)
    if await components.store.count_complaints():
        print("  Complaints already present; skipping.")
        return

    print("Seeding complaints...")
    for form in SAMPLE_COMPLAINTS:
        receipt = await components.pipeline.submit(form)
        target = receipt.assigned_to or "manual triage"
        print(f"  {receipt.complaint_code}: {form.issue_type} in {form.city} -> {target}")

    emitted = await components.scheduler.run_pending()
    print(f"  Inserted {len(SAMPLE_COMPLAINTS)} complaints and {emitted} notifications.")

    print("\n✅ Seeding complete.")


def parse_args():
    import argparse
    parser = argparse.ArgumentParser(description="Seed database with sample complaints")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    return parser.parse_args()


async def main():
    args = parse_args()
    try:
        await seed_complaints(confirm=not args.yes)
    finally:
        await async_engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
