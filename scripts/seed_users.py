"""
Seed a minimal organisation: one admin, one manager and one employee
reporting to that manager. Safe to run repeatedly.
"""
import sys
import os
import logging
from sqlalchemy.orm import Session

# Ensure we can import leavedesk modules
sys.path.append(os.getcwd())

from leavedesk.database import SessionLocal, init_db
from leavedesk.models.user import User, UserRole
from leavedesk.services.auth import get_password_hash

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_user(db: Session, email, password, full_name, role, department=None, manager=None):
    # Check if user already exists to avoid unique constraint errors
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        logger.info(f"User {email} already exists. Skipping.")
        return existing_user

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        role=role,
        department=department,
        manager_id=manager.id if manager else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {role.value} -> {email}")
    return user


def seed():
    init_db()
    db: Session = SessionLocal()
    try:
        create_user(db, "admin@leavedesk.io", "Admin123!", "System Administrator", UserRole.ADMIN, "HR")
        manager = create_user(db, "manager@leavedesk.io", "Manager123!", "Morgan Manager", UserRole.MANAGER, "Engineering")
        create_user(db, "employee@leavedesk.io", "Employee123!", "Evan Employee", UserRole.EMPLOYEE, "Engineering", manager=manager)
    except Exception as e:
        logger.error(f"Error seeding users: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
