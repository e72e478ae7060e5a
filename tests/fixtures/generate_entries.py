#!/usr/bin/env python3
"""
Generate random time entries and invoices for testing and demo reports.

Usage:
    uv run python tests/fixtures/generate_entries.py --year 2025 > data/export.json
"""

import argparse
import json
import random
import sys
from datetime import date, timedelta
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from core.dates import days_in_month  # noqa: E402

# Customers
CUSTOMERS = ["Acme Corp", "Globex", "Initech", "Umbrella"]

# Work descriptions
WORK_DESCRIPTIONS = [
    "Requirements workshop",
    "Code review",
    "Deployment",
    "Sprint planning",
    "Bug fixing",
    "",
]

PAUSE_CHOICES = [0, 0, 15, 30, 45, 60]
HOURLY_RATE = 95.0


def generate_entries(year: int, month: int, fake: Faker, workday_ratio: float = 0.6) -> list[dict]:
    """Generate one month of entries for one customer; weekends stay empty."""
    entries = []
    for day in range(1, days_in_month(year, month) + 1):
        d = date(year, month, day)
        if d.weekday() >= 5 or random.random() > workday_ratio:
            continue

        start_hour = random.randint(7, 10)
        start_min = random.choice([0, 15, 30, 45])
        length = random.randint(2 * 60, 9 * 60)
        start = start_hour * 60 + start_min
        end = min(start + length, 23 * 60 + 59)

        entries.append(
            {
                "date": d.isoformat(),
                "start": f"{start // 60:02d}:{start % 60:02d}",
                "end": f"{end // 60:02d}:{end % 60:02d}",
                "pause_minutes": random.choice(PAUSE_CHOICES),
                "notes": random.choice(WORK_DESCRIPTIONS) or fake.catch_phrase(),
            }
        )
    return entries


def generate_export(year: int, seed: int | None = None) -> dict:
    """Entries for every customer and month of ``year`` plus one invoice per customer-month."""
    if seed is not None:
        random.seed(seed)
        Faker.seed(seed)
    fake = Faker()

    time_entries: dict[str, list[dict]] = {}
    invoices = []
    number = 1
    for customer in CUSTOMERS:
        customer_entries = []
        for month in range(1, 13):
            month_entries = generate_entries(year, month, fake)
            customer_entries.extend(month_entries)
            if not month_entries:
                continue

            hours = sum(
                (int(e["end"][:2]) * 60 + int(e["end"][3:]))
                - (int(e["start"][:2]) * 60 + int(e["start"][3:]))
                - e["pause_minutes"]
                for e in month_entries
            ) / 60
            invoice_date = date(year, month, days_in_month(year, month))
            invoices.append(
                {
                    "id": fake.uuid4(),
                    "invoice_number": f"{number:03d}",
                    "invoice_date": invoice_date.isoformat(),
                    "due_date": (invoice_date + timedelta(days=14)).isoformat(),
                    "status": "sent",
                    "is_paid": random.random() < 0.7,
                    "total": round(max(0.0, hours) * HOURLY_RATE, 2),
                    "client_name": customer,
                }
            )
            number += 1
        time_entries[customer] = customer_entries

    return {"time_entries": time_entries, "invoices": invoices}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate random time entries and invoices")
    parser.add_argument("--year", type=int, default=date.today().year)
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    print(json.dumps(generate_export(args.year, args.seed), indent=2))
