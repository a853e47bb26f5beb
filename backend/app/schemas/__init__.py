"""Pydantic Schemas — request/response contracts for the JSON API.

Invariants:
    - Schemas validate at the system boundary; services receive already-normalized values
    - Response schemas never expose password hashes or lockout counters

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
