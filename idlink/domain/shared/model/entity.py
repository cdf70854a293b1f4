from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base class for domain entities (identity-bearing, mutable)."""

    model_config = ConfigDict(validate_assignment=True)
