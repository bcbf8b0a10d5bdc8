"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Enum fields accept exactly the values of the matching core/domain_types enum
    - Money leaves the API as a JSON number (float), never a string

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Response models read ORM rows directly (from_attributes=True)
"""
