"""
Relationship request builder.

Turns (node, id, relationship, related node, related id, params, data) into
a fully formed RequestDescriptor. Pure: no I/O, never raises on odd input.
A malformed combination simply yields a URL the service will reject.

URL shape:
    {base}/{node}[/{node_id}][/{relationship}][/{related_node}][/{related_id}]

Encoding rules:
    - Query params: None dropped, booleans as "true"/"false", rest str()
    - Non-GET: ``data`` is the JSON body. With exact content-length framing
      an absent body is sent as "{}" with an explicit Content-Length.
    - GET: ``data`` is folded into the query string after ``params``.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from ..config import MyFTSettings

API_KEY_HEADER = "X-API-KEY"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the transport needs to send one request."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: list[tuple[str, str]] = field(default_factory=list)
    content: bytes | None = None


def build_url(
    base: str,
    node: str,
    node_id: str | None = None,
    relationship: str | None = None,
    related_node: str | None = None,
    related_id: str | None = None,
) -> str:
    """Append the path segments that are present, in fixed order."""
    url = f"{base.rstrip('/')}/{node}"
    for segment in (node_id, relationship, related_node, related_id):
        if segment is not None:
            url += f"/{segment}"
    return url


def build_scoped_url(
    base: str,
    node: str,
    node_id: str,
    related_node: str,
    related_id: str,
    relationship: str,
    related_type: str,
) -> str:
    """Six-segment path for reads scoped to a parent node.

    e.g. ``license/{id}/concept/{id}/followed/user``
    """
    return f"{base.rstrip('/')}/{node}/{node_id}/{related_node}/{related_id}/{relationship}/{related_type}"


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def encode_params(params: dict[str, Any] | None) -> list[tuple[str, str]]:
    """Stringify query params, omitting None values. Order is preserved."""
    if not params:
        return []
    return [(key, _encode_value(value)) for key, value in params.items() if value is not None]


def build_request(
    method: str,
    url: str,
    data: Any = None,
    params: dict[str, Any] | None = None,
    api_key: str | None = None,
    exact_content_length: bool = False,
) -> RequestDescriptor:
    """Build a descriptor for ``method url`` with body/query encoding applied."""
    method = method.upper()
    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if api_key:
        headers[API_KEY_HEADER] = api_key

    query = encode_params(params)
    content: bytes | None = None

    if method != "GET":
        if exact_content_length:
            # Empty bodies must still be "{}" when framing is enforced
            content = json.dumps(data if data is not None else {}).encode("utf-8")
            headers["Content-Length"] = str(len(content))
        elif data is not None:
            content = json.dumps(data).encode("utf-8")
    else:
        if exact_content_length:
            headers["Content-Length"] = "0"
        if isinstance(data, dict):
            query.extend(encode_params(data))

    return RequestDescriptor(method=method, url=url, headers=headers, params=query, content=content)


class RelationshipRequestBuilder:
    """Binds base URL, API key and framing rules from settings."""

    def __init__(self, settings: MyFTSettings):
        self.base_url = settings.api_url
        self.api_key = settings.api_key.get_secret_value() if settings.api_key else None
        self.exact_content_length = settings.exact_content_length

    def relationship(
        self,
        method: str,
        node: str,
        node_id: str | None = None,
        relationship: str | None = None,
        related_node: str | None = None,
        related_id: str | None = None,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> RequestDescriptor:
        url = build_url(self.base_url, node, node_id, relationship, related_node, related_id)
        return self._build(method, url, data, params)

    def scoped(
        self,
        method: str,
        node: str,
        node_id: str,
        related_node: str,
        related_id: str,
        relationship: str,
        related_type: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> RequestDescriptor:
        url = build_scoped_url(self.base_url, node, node_id, related_node, related_id, relationship, related_type)
        return self._build(method, url, data, params)

    def _build(self, method: str, url: str, data: Any, params: dict[str, Any] | None) -> RequestDescriptor:
        return build_request(
            method,
            url,
            data=data,
            params=params,
            api_key=self.api_key,
            exact_content_length=self.exact_content_length,
        )
