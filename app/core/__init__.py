"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from api/, infrastructure/ or db/
    - Tenant resolution, frame location and report encoding are pure functions

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
