"""Custom field schemas."""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    """Closed vocabulary of cabinet field types."""
    TEXT_WITH_SYMBOLS = "Text/Number with Special Symbols"
    TEXT_ONLY = "Text Only"
    NUMBER_ONLY = "Number Only"
    CURRENCY = "Currency"
    DATE = "Date"
    TIME = "Time"
    TIME_AND_DATE = "Time and Date"
    YES_NO = "Yes/No"
    TAGS = "Tags/Labels"
    ATTACHMENT = "Attachment"

    @classmethod
    def resolve(cls, value: str) -> Optional["FieldType"]:
        """Return the member for *value*, or None for an unknown type."""
        try:
            return cls(value)
        except ValueError:
            return None


class CustomFieldDefinition(BaseModel):
    """One entry of Cabinet.custom_fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Union[int, str]
    name: str
    type: str
    is_mandatory: bool = Field(default=False, alias="isMandatory")
    character_limit: Optional[int] = Field(default=None, alias="characterLimit")

    @property
    def field_type(self) -> Optional[FieldType]:
        return FieldType.resolve(self.type)


class ValidatedField(BaseModel):
    """Stored shape of a validated custom field value."""

    model_config = ConfigDict(populate_by_name=True)

    field_id: Union[int, str] = Field(alias="fieldId")
    type: str
    value: Any = None

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)
