"""
Script to create an admin account, or promote an existing user to admin.
Run: python -m scripts.create_admin admin@example.com 'password' [First] [Last]
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from crosscareers.db.session import SessionLocal
from crosscareers.db.init_db import init_db
from crosscareers.db.models.user import User
from crosscareers.core.security import hash_password
from crosscareers.services.auth_service import unique_referral_code
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_admin(email: str, password: str, first_name: str = "Site", last_name: str = "Admin") -> bool:
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if user:
            logger.info(f"Promoting existing user to admin: {email} (ID: {user.id})")
            user.role = "admin"
            user.is_deleted = False
            user.is_verified = True
            user.password_hash = hash_password(password)
        else:
            logger.info(f"Creating admin: {email}")
            user = User(
                first_name=first_name,
                last_name=last_name,
                email=email.lower(),
                password_hash=hash_password(password),
                role="admin",
                is_verified=True,
                referral_code=unique_referral_code(db),
                refresh_tokens=[],
            )
            db.add(user)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating admin: {e}", exc_info=True)
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.create_admin <email> <password> [first_name] [last_name]")
        sys.exit(2)

    init_db()
    email, password = sys.argv[1], sys.argv[2]
    names = sys.argv[3:5]
    if create_admin(email, password, *names):
        print(f"\n[SUCCESS] {email} is an admin")
    else:
        print(f"\n[ERROR] Failed to set up admin {email}")
        sys.exit(1)
