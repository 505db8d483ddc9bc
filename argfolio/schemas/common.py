# argfolio/schemas/common.py
"""
Shared schema base and reusable field types.

Every stored document and API body uses camelCase keys on the wire
(they double as the remote sync and backup payload), while Python code
uses snake_case attributes. `populate_by_name` lets tests and services
build models with either.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases for JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_document(self) -> dict:
        """Serialize to the stored/wire JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


PositiveDecimal = Annotated[Decimal, Field(gt=0)]
NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]
