"""Shared pydantic base for document models."""

import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id(prefix: str) -> str:
    """Return a fresh id such as ``text_3f9a1``."""
    return f"{prefix}_{uuid.uuid4().hex[:5]}"


class TimelineModel(BaseModel):
    """Base model: snake_case attributes, camelCase keys in the JSON document."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
