"""Shared base for JSON payloads exchanged with the browser dashboard."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Serialises snake_case fields as camelCase and accepts either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
