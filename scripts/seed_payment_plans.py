#!/usr/bin/env python3
"""
Create the default payment plans (1, 3, 6 and 12 months) if they are missing.
Run from the project root: python -m scripts.seed_payment_plans
"""
import os
import sys

# project root on PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wifidash.core.logging import configure_logging
from wifidash.db.session import SessionLocal
from wifidash.services.payment_plans.service import PaymentPlanService


def main():
    configure_logging()
    db = SessionLocal()
    try:
        created = PaymentPlanService(db).seed_defaults()
        print(f"Payment plans seeding completed: {created} created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
