"""Mock HTTP responses for stored content.

A ``MockHttpClient`` resolves URLs of the form
``<scheme>://<host>/<provider_type>/<identifier>/<path...>`` against an
explicit ``DatastoreRegistry`` and renders the stored payload as a
``MockResponse``. Nothing here touches the network.
"""

from __future__ import annotations

import logging
from email.utils import format_datetime
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from simstore.exceptions.handlers import not_found_response
from simstore.schemas.datastore_item import ATTRIBUTE_HEADERS, DatastoreItem
from simstore.schemas.http import MockResponse

if TYPE_CHECKING:
    from simstore.services.datastore_service import DatastoreService

logger = logging.getLogger(__name__)


def success_response(data: bytes, item: DatastoreItem) -> MockResponse:
    headers = {
        "content-type": item.content_type,
        "content-length": str(len(data)),
        "last-modified": format_datetime(item.upload_timestamp, usegmt=True),
    }
    for attribute, header in ATTRIBUTE_HEADERS.items():
        value = item.attributes.get(attribute)
        if value is not None:
            headers[header] = value
    return MockResponse(status_code=200, reason="OK", headers=headers, body=bytes(data))


def render_item_response(datastore: DatastoreService, path: str) -> MockResponse:
    raw_data = datastore.get_raw_data(path)
    item = datastore.get_datastore_item(path)
    if raw_data is None or item is None:
        return not_found_response()
    return success_response(raw_data, item)


class DatastoreRegistry:
    """Explicit lookup of datastore instances by (provider_type, identifier)."""

    def __init__(self) -> None:
        self._instances: dict[tuple[str, str], DatastoreService] = {}

    def register(self, datastore: DatastoreService) -> None:
        self._instances[(datastore.provider_type, datastore.instance_key)] = datastore

    def unregister(self, datastore: DatastoreService) -> None:
        self._instances.pop((datastore.provider_type, datastore.instance_key), None)

    def lookup(self, provider_type: str, identifier: str) -> DatastoreService | None:
        return self._instances.get((provider_type, identifier))


class MockHttpClient:
    def __init__(self, registry: DatastoreRegistry):
        self.registry = registry

    def get(self, url: str) -> MockResponse:
        segments = [unquote(segment) for segment in urlparse(url).path.split("/") if segment]
        if len(segments) < 3:
            logger.debug("[mock_http] malformed url=%s", url)
            return not_found_response()

        provider_type, identifier = segments[0], segments[1]
        data_path = "/".join(segments[2:])
        datastore = self.registry.lookup(provider_type, identifier)
        if datastore is None:
            logger.debug("[mock_http] unknown instance provider_type=%s identifier=%s", provider_type, identifier)
            return not_found_response()
        return render_item_response(datastore, data_path)

    def request(self, method: str, url: str) -> MockResponse:
        return self.get(url)
