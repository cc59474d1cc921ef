"""Infrastructure Layer — store clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic (errors excepted)
    - Every external call is bounded by a timeout and mapped to a typed error

Design Decisions:
    - Thin wrappers over raw clients keep SDK types out of services
"""
