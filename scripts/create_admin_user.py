#!/usr/bin/env python3
"""
Production script to create the initial admin user
Usage: python scripts/create_admin_user.py [email] [password]
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError
from bloodbank.core.config import settings
from bloodbank.core.security import hash_password
from bloodbank.database.database import SessionLocal, init_db
from bloodbank.models.user import User, UserRole

DEFAULT_EMAIL = "admin@bloodbank.org"
DEFAULT_PASSWORD = "admin123"

def create_admin_user(email: str = DEFAULT_EMAIL, password: str = DEFAULT_PASSWORD):
    """Create the first admin account; privileged roles cannot self-register."""
    init_db()
    db = SessionLocal()

    try:
        existing_admin = db.query(User).filter(User.email == email.lower()).first()
        if existing_admin:
            print("✅ Admin user already exists")
            return

        admin_user = User(
            email=email.lower(),
            hashed_password=hash_password(password, settings.BCRYPT_ROUNDS),
            first_name="System",
            last_name="Administrator",
            role=UserRole.ADMIN,
        )

        db.add(admin_user)
        db.commit()
        print("✅ Admin user created successfully!")
        print(f"📧 Email: {email}")
        print("⚠️  Please change the password after first login!")

    except SQLAlchemyError as e:
        print(f"❌ Error creating admin user: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()

if __name__ == "__main__":
    create_admin_user(*sys.argv[1:3])
