"""ORM Models — SQLAlchemy declarative models for all marketplace entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Money columns are Numeric(10, 2) mapped to Decimal

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from account_market.models.user import User  # noqa: F401
from account_market.models.listing import Listing  # noqa: F401
from account_market.models.cart_item import CartItem  # noqa: F401
from account_market.models.transaction import Transaction, TransactionItem  # noqa: F401
from account_market.models.dispute import Dispute  # noqa: F401
from account_market.models.review import Review  # noqa: F401
from account_market.models.withdrawal_request import WithdrawalRequest  # noqa: F401
