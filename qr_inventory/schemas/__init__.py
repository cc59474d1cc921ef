"""Pydantic Schemas — value objects passed across the core's upward surface.

Invariants:
    - Schemas validate at the boundary (transport input, rows read back)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
"""
