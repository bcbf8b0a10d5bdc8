"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Every multi-entity write runs inside one unit_of_work (commit or roll back together)
    - Balances are only touched through LedgerService
    - Null-collapse operations return None and log the internal reason

Design Decisions:
    - One service class per component, constructed per request with the AsyncSession
    - Collaborators (ledger, user directory, settings) injectable for tests
"""
