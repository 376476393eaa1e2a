"""Base model configuration for feature definition references."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with frozen, read-only instances."""

    model_config = ConfigDict(frozen=True)
