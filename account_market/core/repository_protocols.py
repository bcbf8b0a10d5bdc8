"""Boundary Protocols — contracts between the engines and their collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Balances are reachable only through LedgerStore credit/debit (no raw setter)
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - UserDirectory is the narrow face of the external identity store: engines ask
      "does this user exist / is it verified", never how users are registered
    - LedgerStore methods never commit: the calling engine owns the unit of work
"""

from decimal import Decimal
from typing import Protocol

from account_market.core.domain_types import UserId


class UserLike(Protocol):
    """Structural contract for user records handed to engines."""
    id: int
    role: str
    is_verified: bool
    balance: Decimal


class UserDirectory(Protocol):
    """Contract for identity lookups — implemented by shell."""
    async def get_user(self, user_id: UserId) -> UserLike | None: ...
    async def exists(self, user_id: UserId) -> bool: ...


class LedgerStore(Protocol):
    """Contract for balance mutation — implemented by shell."""
    async def get_balance(self, user_id: UserId) -> Decimal: ...
    async def credit(self, user_id: UserId, amount: Decimal) -> Decimal: ...
    async def debit(self, user_id: UserId, amount: Decimal) -> Decimal: ...
    async def debit_up_to(self, user_id: UserId, amount: Decimal) -> Decimal: ...
