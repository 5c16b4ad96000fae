"""Shared schema bases and response envelopes"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Serialized with camelCase keys; accepts either spelling on input"""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class MessageResponse(BaseModel):
    """Envelope for mutations that carry no payload"""
    success: bool = True
    message: str


def strip_required(value: str) -> str:
    """Trim a required text field and reject blanks"""
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def strip_optional(value: Optional[str]) -> Optional[str]:
    """Trim an optional text field, mapping blanks to None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


__all__ = [
    "CamelModel",
    "MessageResponse",
    "strip_required",
    "strip_optional",
]
