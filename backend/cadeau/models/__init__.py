from .accounts import Account, SessionToken, Partner
from .catalog import GiftType
from .inventory import InventoryEntry
from .purchases import Purchase, PurchaseLine, ImmutableReceiptError
from .transactions import GiftTransaction, STATUS_ISSUED, STATUS_REDEEMED

__all__ = [
    'Account', 'SessionToken', 'Partner',
    'GiftType',
    'InventoryEntry',
    'Purchase', 'PurchaseLine', 'ImmutableReceiptError',
    'GiftTransaction', 'STATUS_ISSUED', 'STATUS_REDEEMED',
]
