# gatepass/schemas/base.py
"""
Base schema classes with common configuration.

Documents are persisted with camelCase keys; Python code uses the
snake_case attribute names.
"""

from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = ["BaseSchema", "DocumentSchema"]

TDocument = TypeVar("TDocument", bound="DocumentSchema")


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class DocumentSchema(BaseSchema):
    """
    Schema stored as a document; ``id`` is the document key and is not
    part of the stored payload.
    """

    id: str

    @classmethod
    def from_document(cls: Type[TDocument], doc_id: str, data: Dict[str, Any]) -> TDocument:
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe payload with camelCase keys and unset fields omitted."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id"},
            exclude_none=True,
        )
