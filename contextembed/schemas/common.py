"""Shared pydantic base for wire-facing models."""

import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_WHITESPACE = re.compile(r"\s+")


class CamelModel(BaseModel):
    """Model whose JSON keys are camelCase while Python attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )


def collapse_whitespace(value):
    """Collapse runs of whitespace and trim. Non-strings pass through untouched."""
    if isinstance(value, str):
        return _WHITESPACE.sub(" ", value).strip()
    return value


def format_validation_error(error) -> str:
    """Flatten a pydantic ValidationError into ``field: message; field: message``."""
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    )
