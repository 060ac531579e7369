"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict

from .base import CamelModel


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(CamelModel):
    """
    Request DTO base that always forbids unexpected fields.

    Accepts both the camelCase wire names and the snake_case field names.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)
