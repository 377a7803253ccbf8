# ------------------------------ IMPORTS ------------------------------
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["SUBSCRIPTION_SWEEP_ENABLED"] = "false"

from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.config.settings import EmailConfig
from core.database import SessionLocal, init_db, drop_db, get_db
from core.database.models import Account, Dealer, Listing, SellerType, Subscription, UserSubscription
from core.security.auth import hash_password, create_session_token
from core.security.roles import Role, format_roles
from core.services.email_service import EmailService, get_email_service
from core.utils.data_helpers import today
from main import app

PASSWORD = "password123"

# ------------------------------ FAKES ------------------------------

class RecordingEmailService(EmailService):
    """Keeps outgoing mail in memory instead of calling SendGrid."""

    def __init__(self):
        super().__init__(config=EmailConfig(sendgrid_api_key=""))
        self.sent = []

    def send(self, to_email, subject, html):
        self.sent.append({"to": to_email, "subject": subject, "html": html})
        return True

    def subjects_for(self, to_email):
        return [mail["subject"] for mail in self.sent if mail["to"] == to_email]

# ------------------------------ FIXTURES ------------------------------

@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_db()

@pytest.fixture
def email():
    return RecordingEmailService()

@pytest.fixture
def client(db, email):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

@pytest.fixture
def auth_headers():
    def build(account):
        return {"Authorization": f"Bearer {create_session_token(account)}"}
    return build

# ------------------------------ FACTORIES ------------------------------

@pytest.fixture
def make_account(db):
    def factory(username, roles=(Role.USER,), password=PASSWORD, email=None):
        account = Account(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(password),
            roles=format_roles(roles),
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account
    return factory

@pytest.fixture
def make_listing(db):
    def factory(seller, seller_type=SellerType.PRIVATE, price="10000.00", **fields):
        listing = Listing(seller_id=seller.id, seller_type=seller_type, price=Decimal(price), **fields)
        db.add(listing)
        db.commit()
        db.refresh(listing)
        return listing
    return factory

@pytest.fixture
def make_dealer(db):
    def factory(owner, name="Fjord City Cars", **fields):
        dealer = Dealer(owner_id=owner.id, name=name, **fields)
        db.add(dealer)
        db.commit()
        db.refresh(dealer)
        return dealer
    return factory

@pytest.fixture
def make_plan(db):
    def factory(name="Dealer Basic", price="49.00", duration_days=30, max_featured_cars=1, **fields):
        plan = Subscription(
            name=name,
            price=Decimal(price),
            duration_days=duration_days,
            max_featured_cars=max_featured_cars,
            **fields
        )
        db.add(plan)
        db.commit()
        db.refresh(plan)
        return plan
    return factory

@pytest.fixture
def make_user_subscription(db):
    def factory(account, plan, expiry_date=None, auto_renew=False, active=True, start_date=None):
        user_subscription = UserSubscription(
            account_id=account.id,
            subscription_id=plan.id,
            start_date=start_date or today() - timedelta(days=plan.duration_days),
            expiry_date=expiry_date or today() + timedelta(days=plan.duration_days),
            auto_renew=auto_renew,
            active=active,
        )
        db.add(user_subscription)
        db.commit()
        db.refresh(user_subscription)
        return user_subscription
    return factory

# ------------------------------ END OF FILE ------------------------------
