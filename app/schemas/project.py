"""Project Schemas — request/response contracts for /api/test.

Invariants:
    - JSON keys are "Id" and "Name" (existing clients depend on the casing)
    - ProjectInput.Name is required; Id in a request body is ignored

Design Decisions:
    - snake_case attributes with aliases, populate_by_name for construction
      from ORM rows
"""

from pydantic import BaseModel, ConfigDict, Field


class ProjectInput(BaseModel):
    """Body of POST /api/test and PUT /api/test/{id}."""
    name: str = Field(alias="Name", max_length=10_000)


class ProjectResponse(BaseModel):
    """Public representation of a project row."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")


class MessageResponse(BaseModel):
    message: str
