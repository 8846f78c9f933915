"""
Exhaustive collection of paged list reads.

The service pages list endpoints as ``{"items": [...], "total": n}``. We keep
requesting ``page=1,2,...`` with a fixed ``limit`` while the *current*
response reports more items than we have asked for so far
(``page * limit < total``). Termination depends only on the latest page:
if ``total`` shifts between pages we may read one page too few or too many,
and that is accepted.
"""

import logging
import re
from typing import Any

from .request import RelationshipRequestBuilder
from .transport import HttpTransport, parse_json

logger = logging.getLogger(__name__)

PAGE_SIZE = 500

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_total(value: Any) -> int | None:
    """Leading integer of ``total`` ("2.0" -> 2), or None when absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


async def fetch_all(
    transport: HttpTransport,
    builder: RelationshipRequestBuilder,
    node: str,
    node_id: str,
    relationship: str,
    related_node: str,
    page_size: int = PAGE_SIZE,
) -> list[Any]:
    """
    Collect every item of a paged relationship list, in page order.

    Args:
        transport: Sends requests (raises NotFoundError / TransportError)
        builder: Builds the page requests
        node, node_id, relationship, related_node: Path of the list
        page_size: Items per page

    Returns:
        Concatenation of every page's ``items``. A response without an
        ``items`` list ends the read.
    """
    operation = f"fetch_all {node}/{node_id}/{relationship}/{related_node}"
    logger.debug(f"{operation}: start (page_size={page_size})")

    items: list[Any] = []
    page = 1
    while True:
        request = builder.relationship(
            "GET",
            node,
            node_id,
            relationship,
            related_node,
            params={"page": page, "limit": page_size},
        )
        body = parse_json(await transport.execute(request), operation)

        page_items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(page_items, list):
            break

        items.extend(page_items)

        total = _parse_total(body.get("total"))
        if not total or page * page_size >= total:
            break
        page += 1

    logger.debug(f"{operation}: {len(items)} items over {page} page(s)")
    return items
