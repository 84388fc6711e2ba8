from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Attribute keys in the order they are recorded and rendered as headers.
ATTRIBUTE_HEADERS: dict[str, str] = {
    "contentEncoding": "content-encoding",
    "contentLanguage": "content-language",
    "cacheControl": "cache-control",
}


class DatastoreItem(BaseModel):
    """Metadata describing one stored object."""

    location_uri: str
    content_type: str = DEFAULT_CONTENT_TYPE
    upload_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    provider_id: str
    provider_upload_id: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class StoredRecord(BaseModel):
    """On-disk envelope keeping the original logical path next to its record."""

    path: str
    item: DatastoreItem


def build_attributes(
    *,
    content_encoding: str | None = None,
    content_language: str | None = None,
    cache_control: str | None = None,
) -> dict[str, str]:
    values = {
        "contentEncoding": content_encoding,
        "contentLanguage": content_language,
        "cacheControl": cache_control,
    }
    return {key: value for key, value in values.items() if value is not None}
