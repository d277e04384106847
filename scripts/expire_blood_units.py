#!/usr/bin/env python3
"""
Mark Available blood units past their expiry date as Expired.
Meant to be run periodically (e.g. from cron).
Usage: python scripts/expire_blood_units.py
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError
from bloodbank.core.logging import logger
from bloodbank.database.database import SessionLocal
from bloodbank.services.inventory_service import expire_stale_units

def main():
    db = SessionLocal()
    try:
        expired = expire_stale_units(db)
        logger.info(f"Expiry sweep finished: {expired} unit(s) expired")
        print(f"✅ {expired} blood unit(s) marked Expired")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Expiry sweep failed: {e}")
        sys.exit(1)
    finally:
        db.close()

if __name__ == "__main__":
    main()
