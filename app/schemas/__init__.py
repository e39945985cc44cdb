"""Pydantic Schemas — request/response and outbound report contracts.

Invariants:
    - Schemas validate at system boundaries (user input, API responses, telemetry payload)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
