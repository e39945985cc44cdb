"""Infrastructure Layer — database, logging, trace capture, report delivery.

Invariants:
    - Infrastructure never imports from api/
    - Every outbound call is bounded by a timeout; report delivery never raises

Design Decisions:
    - Thin wrappers over raw clients (ADR: single responsibility)
"""
