"""Infrastructure Layer — database plumbing and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All storage failures mapped to DatabaseError (opaque, never retried here)
"""
