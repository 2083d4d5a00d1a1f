"""
Pytest fixtures for cadeau backend tests.

Provides test database setup, catalog/account/partner fixtures, and test client.
"""

import pytest

from cadeau import create_app
from cadeau.config import TestingConfig
from cadeau.extensions import db
from cadeau.models import Account, GiftType
from cadeau.services import build_lifecycle, partner_service, session_service
from cadeau.services.auth_service import hash_password


TEST_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def lifecycle(app, db_session):
    """Lifecycle components bound to the test session."""
    return build_lifecycle(db_session, app.config)


@pytest.fixture(scope='function')
def catalog(db_session):
    """Small catalog: three active gift types across two categories, one retired."""
    gift_types = {
        "coffee": GiftType(name="Koffie", emoji="☕", description="Verse koffie", price_cents=275, category="drinks"),
        "beer": GiftType(name="Biertje", emoji="🍺", description="Een biertje", price_cents=350, category="drinks"),
        "cinema": GiftType(name="Bioscoopkaartje", emoji="🎬", description="Ticket", price_cents=1250, category="entertainment"),
        "retired": GiftType(name="Cadeaubon", emoji="🎁", description="Niet meer leverbaar", price_cents=500,
                            category="lifestyle", is_active=False),
    }
    db_session.add_all(gift_types.values())
    db_session.commit()
    return gift_types


def _make_account(db_session, email: str, name: str) -> Account:
    account = Account(email=email, name=name, password_hash=hash_password(TEST_PASSWORD, rounds=4))
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture(scope='function')
def account(db_session):
    """Sender account."""
    return _make_account(db_session, "anna@example.com", "Anna")


@pytest.fixture(scope='function')
def other_account(db_session):
    return _make_account(db_session, "bram@example.com", "Bram")


@pytest.fixture(scope='function')
def auth_headers(account):
    _, token = session_service.create_session(account.id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def partner(db_session):
    """Active partner; returns (partner, api_key)."""
    return partner_service.create_partner(
        business_name="Café Noord",
        owner_name="Sam",
        email="sam@noord.example",
        city="Utrecht",
        active=True,
    )


@pytest.fixture(scope='function')
def partner_headers(partner):
    _, api_key = partner
    return {'X-Partner-Key': api_key}


@pytest.fixture(scope='function')
def stocked(lifecycle, account, catalog):
    """Give the sender 3 beers and 1 coffee."""
    from cadeau.services.purchase_service import PurchaseItem

    lifecycle.purchases.purchase(account.id, [
        PurchaseItem(catalog["beer"].id, 3),
        PurchaseItem(catalog["coffee"].id, 1),
    ])
    return catalog
