"""
Typed metadata schema for stored entries.
The persisted metadata bag is closed over a small union of scalar value types.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MetadataValue = Union[str, int, float, bool, None]

_SCALAR_TYPES = (str, int, float, bool)


class EntryMetadata(BaseModel):
    """Metadata stored with every entry in index.json."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    group_id: str = Field(alias="groupId")
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat(), alias="createdAt")

    @field_validator('group_id')
    @classmethod
    def group_id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('groupId cannot be empty')
        return v

    @model_validator(mode='after')
    def extra_values_must_be_scalar(self):
        for key, value in (self.model_extra or {}).items():
            if value is not None and not isinstance(value, _SCALAR_TYPES):
                raise ValueError(
                    f"metadata value for '{key}' must be str, int, float, bool or None, "
                    f"got {type(value).__name__}"
                )
        return self

    @classmethod
    def build(cls, group_id: str, extra: Optional[Dict[str, Any]] = None) -> "EntryMetadata":
        """Build metadata from a group id and caller extras; the group id argument wins."""
        data = dict(extra or {})
        data.pop("group_id", None)
        data["groupId"] = group_id
        if "created_at" in data and "createdAt" not in data:
            data["createdAt"] = data.pop("created_at")
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, MetadataValue]:
        """Serialize with persisted key names (groupId, createdAt)."""
        return self.model_dump(by_alias=True)
