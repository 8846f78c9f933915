"""
Chunked, concurrency-bounded batch mutations.

A batch mutation applies the same set of subject records (e.g. concepts to
follow) to many node ids. Ids are split into chunks of ``batch_size`` and
each chunk becomes one request:

    {method} {base}/{node}/{relationship}/{related_node}
    {"subjects": [...], "ids": [chunk]}

At most ``concurrency`` chunk requests are in flight; the rest wait in
submission order. A failing chunk does not stop its siblings. Outcomes are
collected by chunk index, so the result order matches the id order no
matter which request finished first.

Aggregation:
    - at least one chunk succeeded: list of per-chunk outcomes, where a
      failed chunk's slot holds the exception instance
    - every chunk failed, one chunk: that chunk's exception is re-raised
    - every chunk failed, several chunks: one generic ClientError
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any

from ..errors import ClientError
from .request import RelationshipRequestBuilder
from .schema import REL_PROP_KEY
from .transport import HttpTransport, parse_json

logger = logging.getLogger(__name__)

BATCH_USER_COUNT = 100
BATCH_USER_CONCURRENCY = 5


def chunk_ids(ids: str | Sequence[str], size: int) -> list[Any]:
    """
    Split ids into ordered chunks of at most ``size``.

    A single (non-list) id is one chunk and is sent as-is, not wrapped.
    """
    if isinstance(ids, (list, tuple)):
        return [list(ids[i : i + size]) for i in range(0, len(ids), size)]
    return [ids]


def build_subjects(payloads: Sequence[dict[str, Any]], rel_prop: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    """Copy each subject record, attaching relationship properties when given."""
    subjects = []
    for item in payloads:
        subject = dict(item)
        if rel_prop is not None:
            subject[REL_PROP_KEY] = rel_prop
        subjects.append(subject)
    return subjects


async def batch_mutate(
    transport: HttpTransport,
    builder: RelationshipRequestBuilder,
    method: str,
    node: str,
    ids: str | Sequence[str],
    relationship: str,
    related_node: str,
    payloads: Sequence[dict[str, Any]],
    rel_prop: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    batch_size: int = BATCH_USER_COUNT,
    concurrency: int = BATCH_USER_CONCURRENCY,
) -> list[Any]:
    """
    Apply ``payloads`` to every id in ``ids``, one request per chunk.

    Args:
        transport: Sends requests
        builder: Builds chunk requests
        method: HTTP method (POST to add, DELETE to remove)
        node: Kind of the nodes in ``ids``
        ids: One id or an ordered list of ids
        relationship: Relationship kind
        related_node: Kind of the subject records
        payloads: Subject records, e.g. ``[{"uuid": ...}]``
        rel_prop: Relationship properties attached to each subject
        params: Query parameters (noEvent, waitForPurge)
        batch_size: Max ids per chunk
        concurrency: Max chunk requests in flight

    Returns:
        Per-chunk outcomes in chunk order (parsed response or exception).

    Raises:
        The single chunk's exception, or ClientError if several chunks all failed.
    """
    operation = f"batch_mutate {method} {node}/{relationship}/{related_node}"
    chunks = chunk_ids(ids, batch_size)
    if not chunks:
        logger.debug(f"{operation}: no ids, nothing to do")
        return []

    subjects = build_subjects(payloads, rel_prop)
    semaphore = asyncio.Semaphore(concurrency)
    props_str = json.dumps(rel_prop)

    logger.debug(f"{operation}: {len(chunks)} chunk(s), {len(subjects)} subject(s), rel_prop={props_str}")

    async def run_chunk(index: int, chunk: Any) -> Any:
        async with semaphore:
            try:
                request = builder.relationship(
                    method,
                    node,
                    None,
                    relationship,
                    related_node,
                    data={"subjects": subjects, "ids": chunk},
                    params=params,
                )
                result = parse_json(await transport.execute(request), f"{operation} chunk {index}")
            except Exception as e:
                logger.error(f"{operation}: chunk {index} failed ({chunk!r}): {e}")
                return e

            logger.debug(f"{operation}: chunk {index} succeeded")
            return result

    outcomes = await asyncio.gather(*(run_chunk(i, chunk) for i, chunk in enumerate(chunks)))

    if any(not isinstance(outcome, Exception) for outcome in outcomes):
        return list(outcomes)

    if len(outcomes) == 1:
        raise outcomes[0]

    raise ClientError()
