"""
Relationship graph layer for the myFT API.

- Request builder: path + query/body encoding for relationship requests
- Transport: httpx with tenacity retries and error classification
- Pagination aggregator and batch mutation engine
- MyFTClient: the fixed vocabulary of node/relationship operations
"""

from .batch import batch_mutate, chunk_ids
from .client import MyFTClient
from .pagination import fetch_all
from .request import RelationshipRequestBuilder, RequestDescriptor, build_request, build_url
from .schema import NodeKind, RelationshipKind
from .transport import HttpTransport

__all__ = [
    "HttpTransport",
    "MyFTClient",
    "NodeKind",
    "RelationshipKind",
    "RelationshipRequestBuilder",
    "RequestDescriptor",
    "batch_mutate",
    "build_request",
    "build_url",
    "chunk_ids",
    "fetch_all",
]
