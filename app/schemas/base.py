"""
Base schema shared by the request bodies.
"""
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, model_validator
from typing import Any


class BaseSchema(BaseModel):
    """
    Strips surrounding whitespace from every string in the incoming
    payload before field validation runs.
    """

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def strip_all_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            new_data = {}
            for k, v in data.items():
                if isinstance(v, str):
                    new_data[k] = v.strip()
                else:
                    new_data[k] = v
            return new_data
        return data


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
