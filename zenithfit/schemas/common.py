from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for documents shared with the web client and the AI service (camelCase on the wire)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PersistOutcome(CamelModel):
    ok: bool = True
    error: Optional[str] = None
