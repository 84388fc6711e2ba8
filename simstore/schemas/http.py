from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus


@dataclass
class MockResponse:
    status_code: int
    reason: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


def plain_text_response(status: HTTPStatus, message: str | None = None) -> MockResponse:
    body = (message if message is not None else status.phrase).encode("utf-8")
    return MockResponse(
        status_code=status.value,
        reason=status.phrase,
        headers={"content-type": "text/plain", "content-length": str(len(body))},
        body=body,
    )
