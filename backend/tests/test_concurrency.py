"""
Concurrency tests against a file-backed SQLite database.

Each worker thread pushes its own app context and therefore gets its own
session and connection, the way concurrent requests would.
"""

import threading

import pytest

from cadeau import create_app
from cadeau.config import TestingConfig
from cadeau.extensions import db
from cadeau.models import Account, GiftTransaction, GiftType, STATUS_REDEEMED
from cadeau.services import build_lifecycle
from cadeau.services.errors import AlreadyRedeemedError, InsufficientBalanceError
from cadeau.services.purchase_service import PurchaseItem


WORKERS = 8


@pytest.fixture
def file_app(tmp_path):
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'concurrency.sqlite3'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30, "check_same_thread": False}}

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def seeded(file_app):
    """Account holding the given number of beers; returns (account_id, gift_type_id)."""
    def _seed(units):
        with file_app.app_context():
            gift_type = GiftType(name="Biertje", emoji="🍺", price_cents=350, category="drinks")
            account = Account(email="race@example.com", name="Race", password_hash="x")
            db.session.add_all([gift_type, account])
            db.session.commit()

            lifecycle = build_lifecycle(db.session, file_app.config)
            lifecycle.purchases.purchase(account.id, [PurchaseItem(gift_type.id, units)])
            ids = (account.id, gift_type.id)
            db.session.remove()
            return ids

    return _seed


def _race(file_app, operation):
    """Run operation(lifecycle) in WORKERS threads released together."""
    barrier = threading.Barrier(WORKERS)
    lock = threading.Lock()
    outcomes = []

    def worker():
        with file_app.app_context():
            lifecycle = build_lifecycle(db.session, file_app.config)
            barrier.wait()
            try:
                operation(lifecycle)
                outcome = "ok"
            except (AlreadyRedeemedError, InsufficientBalanceError) as exc:
                outcome = exc.code
            except Exception as exc:
                outcome = repr(exc)
            finally:
                db.session.remove()
            with lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=120)
    return outcomes


def test_concurrent_redeem_succeeds_exactly_once(file_app, seeded):
    account_id, gift_type_id = seeded(1)
    with file_app.app_context():
        code = build_lifecycle(db.session, file_app.config).gifts.send(account_id, gift_type_id).redemption_code
        db.session.remove()

    outcomes = _race(file_app, lambda lifecycle: lifecycle.gifts.redeem(code))

    assert len(outcomes) == WORKERS
    assert outcomes.count("ok") == 1
    assert outcomes.count("already_redeemed") == WORKERS - 1

    with file_app.app_context():
        tx = db.session.query(GiftTransaction).one()
        assert tx.status == STATUS_REDEEMED
        assert tx.redeemed_at is not None


def test_concurrent_send_of_last_unit(file_app, seeded):
    account_id, gift_type_id = seeded(1)

    outcomes = _race(file_app, lambda lifecycle: lifecycle.gifts.send(account_id, gift_type_id))

    assert outcomes.count("ok") == 1
    assert outcomes.count("insufficient_balance") == WORKERS - 1

    with file_app.app_context():
        lifecycle = build_lifecycle(db.session, file_app.config)
        assert lifecycle.ledger.balance(account_id, gift_type_id) == 0
        assert db.session.query(GiftTransaction).count() == 1


def test_concurrent_sends_never_overdraw(file_app, seeded):
    account_id, gift_type_id = seeded(3)

    outcomes = _race(file_app, lambda lifecycle: lifecycle.gifts.send(account_id, gift_type_id))

    assert outcomes.count("ok") == 3
    assert outcomes.count("insufficient_balance") == WORKERS - 3

    with file_app.app_context():
        lifecycle = build_lifecycle(db.session, file_app.config)
        assert lifecycle.ledger.balance(account_id, gift_type_id) == 0
        codes = {tx.redemption_code for tx in db.session.query(GiftTransaction)}
        assert len(codes) == 3
