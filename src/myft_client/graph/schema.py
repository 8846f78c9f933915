"""
Vocabulary of the myFT relationship graph.

Node kinds and relationship names are path segments on the remote API, so
they are spelled exactly as the service expects (note ``license``).

Node kinds:
    user     - An FT user
    group    - A group of users within a licence
    license  - A B2B licence, owning users and groups
    concept  - A followable topic

Relationships:
    member      - user/group belongs to a group/licence
    followed    - user/group follows a concept
    preference  - user has a preference (only the email digest is used)
"""

from enum import StrEnum


class NodeKind(StrEnum):
    USER = "user"
    GROUP = "group"
    LICENCE = "license"
    CONCEPT = "concept"


class RelationshipKind(StrEnum):
    MEMBER = "member"
    FOLLOWED = "followed"
    PREFERENCE = "preference"


# Digest preference edges hang off user/{id}/preferred/preference/email-digest
PREFERRED_SEGMENT = "preferred"
EMAIL_DIGEST_ID = "email-digest"

# Key under which relationship properties travel on each subject record
REL_PROP_KEY = "_rel"

DEFAULT_DIGEST_TYPE = "daily"
DEFAULT_DIGEST_TIMEZONE = "Europe/London"
