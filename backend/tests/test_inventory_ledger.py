"""
Inventory ledger tests.

Balances never go negative, entries are created lazily, and query() only
reports what the account actually holds.
"""

import pytest

from cadeau.models import InventoryEntry
from cadeau.services.errors import InsufficientBalanceError


class TestCredit:
    def test_first_credit_creates_entry(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["coffee"].id, 3)
        db_session.commit()

        assert lifecycle.ledger.balance(account.id, catalog["coffee"].id) == 3

    def test_repeat_credit_increments_single_entry(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["coffee"].id, 2)
        lifecycle.ledger.credit(account.id, catalog["coffee"].id, 5)
        db_session.commit()

        assert lifecycle.ledger.balance(account.id, catalog["coffee"].id) == 7
        assert db_session.query(InventoryEntry).filter_by(account_id=account.id).count() == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, lifecycle, account, catalog, quantity):
        with pytest.raises(ValueError):
            lifecycle.ledger.credit(account.id, catalog["coffee"].id, quantity)

    def test_balance_without_entry_is_zero(self, lifecycle, account, catalog):
        assert lifecycle.ledger.balance(account.id, catalog["cinema"].id) == 0


class TestDebit:
    def test_debit_decrements(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 3)
        lifecycle.ledger.debit(account.id, catalog["beer"].id, 2)
        db_session.commit()

        assert lifecycle.ledger.balance(account.id, catalog["beer"].id) == 1

    def test_debit_to_exactly_zero(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 1)
        lifecycle.ledger.debit(account.id, catalog["beer"].id)
        db_session.commit()

        assert lifecycle.ledger.balance(account.id, catalog["beer"].id) == 0

    def test_overdraw_raises_and_leaves_balance(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 1)
        db_session.commit()

        with pytest.raises(InsufficientBalanceError) as exc_info:
            lifecycle.ledger.debit(account.id, catalog["beer"].id, 2)
        db_session.rollback()

        assert exc_info.value.status == 409
        assert lifecycle.ledger.balance(account.id, catalog["beer"].id) == 1

    def test_debit_without_entry_raises(self, lifecycle, account, catalog):
        with pytest.raises(InsufficientBalanceError):
            lifecycle.ledger.debit(account.id, catalog["cinema"].id)

    def test_debit_is_per_account(self, lifecycle, db_session, account, other_account, catalog):
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 2)
        db_session.commit()

        with pytest.raises(InsufficientBalanceError):
            lifecycle.ledger.debit(other_account.id, catalog["beer"].id)
        db_session.rollback()

        assert lifecycle.ledger.balance(account.id, catalog["beer"].id) == 2


class TestQuery:
    def test_only_positive_balances_ordered_by_category_then_name(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["cinema"].id, 1)
        lifecycle.ledger.credit(account.id, catalog["coffee"].id, 1)
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 2)
        lifecycle.ledger.debit(account.id, catalog["cinema"].id, 1)
        db_session.commit()

        lines = lifecycle.ledger.query(account.id)

        assert [(line.name, line.quantity) for line in lines] == [("Biertje", 2), ("Koffie", 1)]

    def test_line_presentation(self, lifecycle, db_session, account, catalog):
        lifecycle.ledger.credit(account.id, catalog["beer"].id, 2)
        db_session.commit()

        data = lifecycle.ledger.query(account.id)[0].to_dict()

        assert data["gift_type_id"] == catalog["beer"].id
        assert data["price"] == "3.50"
        assert data["price_cents"] == 350
        assert data["category"] == "drinks"
        assert data["quantity"] == 2

    def test_empty_for_new_account(self, lifecycle, other_account):
        assert lifecycle.ledger.query(other_account.id) == []
