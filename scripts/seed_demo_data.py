"""
Seed Demo Data

Creates a demo user, an admin user and a handful of sample buyers, each
with its "created" history entry. Users are reused when they already
exist; buyers are only added to an empty table.

Usage:
    python scripts/seed_demo_data.py
"""
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.buyerleads.db.models import User
from src.buyerleads.db.repository import BuyerRepository, UserRepository
from src.buyerleads.db.session import get_db_session
from src.buyerleads.models.enums import UserRole
from src.buyerleads.services.buyer_service import BuyerService
from src.buyerleads.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

DEMO_USERS = [
    {"user_id": "demo-user", "email": "demo@example.com", "full_name": "Demo User", "role": UserRole.USER},
    {"user_id": "admin-user", "email": "admin@example.com", "full_name": "Admin User", "role": UserRole.ADMIN},
]

SAMPLE_BUYERS = [
    ("demo@example.com", {
        "full_name": "Rajesh Kumar",
        "email": "rajesh.kumar@email.com",
        "phone": "9876543210",
        "city": "CHANDIGARH",
        "property_type": "APARTMENT",
        "bhk": "TWO",
        "purpose": "BUY",
        "budget_min": 5000000,
        "budget_max": 7000000,
        "timeline": "ZERO_TO_THREE_MONTHS",
        "source": "WEBSITE",
        "status": "NEW",
        "notes": "Looking for a 2BHK apartment in Sector 22",
        "tags": ["premium", "urgent"],
    }),
    ("demo@example.com", {
        "full_name": "Priya Sharma",
        "email": "priya.sharma@email.com",
        "phone": "9876543211",
        "city": "MOHALI",
        "property_type": "VILLA",
        "bhk": "THREE",
        "purpose": "BUY",
        "budget_min": 10000000,
        "budget_max": 15000000,
        "timeline": "THREE_TO_SIX_MONTHS",
        "source": "REFERRAL",
        "status": "QUALIFIED",
        "notes": "Interested in villas with garden space",
        "tags": ["luxury", "garden"],
    }),
    ("admin@example.com", {
        "full_name": "Amit Singh",
        "phone": "9876543212",
        "city": "ZIRAKPUR",
        "property_type": "PLOT",
        "purpose": "BUY",
        "budget_min": 2000000,
        "budget_max": 3000000,
        "timeline": "MORE_THAN_SIX_MONTHS",
        "source": "WALK_IN",
        "status": "CONTACTED",
        "notes": "Looking for residential plot for construction",
        "tags": ["construction", "residential"],
    }),
    ("demo@example.com", {
        "full_name": "Neha Gupta",
        "email": "neha.gupta@email.com",
        "phone": "9876543213",
        "city": "PANCHKULA",
        "property_type": "APARTMENT",
        "bhk": "ONE",
        "purpose": "RENT",
        "budget_min": 15000,
        "budget_max": 25000,
        "timeline": "ZERO_TO_THREE_MONTHS",
        "source": "CALL",
        "status": "VISITED",
        "notes": "Young professional looking for 1BHK for rent",
        "tags": ["professional", "furnished"],
    }),
    ("admin@example.com", {
        "full_name": "Vikram Enterprises",
        "email": "vikram@enterprises.com",
        "phone": "9876543214",
        "city": "CHANDIGARH",
        "property_type": "OFFICE",
        "purpose": "RENT",
        "budget_min": 50000,
        "budget_max": 100000,
        "timeline": "THREE_TO_SIX_MONTHS",
        "source": "WEBSITE",
        "status": "NEGOTIATION",
        "notes": "Looking for office space for IT company",
        "tags": ["commercial", "IT", "parking"],
    }),
]


def seed_users(session) -> dict:
    users = {}
    repository = UserRepository()
    for user_fields in DEMO_USERS:
        user = repository.get_by_email(session, user_fields["email"]) or repository.get_or_create(session, **user_fields)
        users[user.email] = user
    session.commit()
    return users


def seed_buyers(session, users: dict) -> int:
    if BuyerRepository().count(session) > 0:
        logger.info("seed_buyers_skipped", reason="buyers table not empty")
        return 0

    service = BuyerService(session)
    for owner_email, payload in SAMPLE_BUYERS:
        owner: User = users[owner_email]
        buyer = service.create_buyer(payload, owner)
        logger.info("seed_buyer_created", buyer_id=buyer.id, full_name=buyer.full_name)
    return len(SAMPLE_BUYERS)


def main():
    setup_logging()
    logger.info("seed_started")

    with get_db_session() as session:
        users = seed_users(session)
        created = seed_buyers(session, users)

    logger.info("seed_completed", users=len(users), buyers=created)


if __name__ == "__main__":
    main()
