"""
Product / warranty records consumed by the linkage engine and the bundle
structures it produces.

Input records come from the storage layer with snake_case column names; the
camelCase aliases are accepted as well and used on output.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WarrantyType(str, Enum):
    """Known warranty types. Other values are tolerated and ranked last."""
    MANUFACTURER = "manufacturer"
    EXTENDED = "extended"
    STORE = "store"
    INSURANCE = "insurance"


_DateLike = Union[dt.datetime, dt.date, str]


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


class Warranty(_Record):
    id: str
    warranty_type: Optional[str] = None
    # Opaque to the engine; carried through untouched.
    warranty_start_date: Optional[_DateLike] = None
    warranty_end_date: Optional[_DateLike] = None
    warranty_duration_months: Optional[Any] = None
    coverage_details: Optional[Any] = None
    ai_confidence_score: Optional[Any] = None


class Product(_Record):
    id: str
    product_name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    serial_number: Optional[str] = None
    # Raw strings are kept as-is; unparseable dates only disable date rules.
    purchase_date: Optional[_DateLike] = None
    is_archived: bool = False
    warranties: List[Warranty] = Field(default_factory=list)

    @field_validator("warranties", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class WarrantyPair(_Record):
    """Two highest-priority warranties of a list."""
    primary: Optional[Warranty] = None
    extended: Optional[Warranty] = None
    has_enhanced: bool = False


class Bundle(_Record):
    """
    One logical purchase.

    ``main_product`` carries the merged warranties of every member;
    ``linked_products`` keeps the other members untouched, in input order.
    """
    main_product: Product
    linked_products: List[Product] = Field(default_factory=list)
    has_enhanced_protection: bool = False

    def member_ids(self) -> List[str]:
        return [self.main_product.id] + [p.id for p in self.linked_products]

    def warranty_pair(self) -> WarrantyPair:
        from warrantylink.stages.protection import primary_extended_pair

        return primary_extended_pair(self.main_product.warranties)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
