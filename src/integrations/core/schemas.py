"""Shared pydantic base for canonical DTOs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CanonicalModel(BaseModel):
    """Base model whose wire names are camelCase.

    Attributes stay snake_case in Python; ``model_dump(by_alias=True)`` yields
    the canonical camelCase document and either spelling is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
