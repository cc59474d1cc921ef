"""Services Layer — registry, ledger, projector and credential operations.

Invariants:
    - Store handles arrive through constructors; no module-level singletons
    - Every mutation reachable from outside goes through operation_guard

Design Decisions:
    - One service per component for locality
"""
