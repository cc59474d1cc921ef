"""Core Layer — pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, or db/
    - All functions are pure and deterministic (token minting aside)

Design Decisions:
    - Functional core separated from imperative shell: services do the IO,
      core decides what is allowed
"""
