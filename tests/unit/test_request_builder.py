"""
Unit tests for the relationship request builder.

Covers path segment ordering, query encoding and body framing rules.
"""

import json

from myft_client.config import MyFTSettings
from myft_client.graph.request import (
    API_KEY_HEADER,
    RelationshipRequestBuilder,
    build_request,
    build_scoped_url,
    build_url,
    encode_params,
)

BASE = "https://api.example.com/v3"


class TestBuildUrl:
    def test_node_only(self):
        assert build_url(BASE, "license") == f"{BASE}/license"

    def test_full_path_in_order(self):
        url = build_url(BASE, "group", "g1", "member", "user", "u1")
        assert url == f"{BASE}/group/g1/member/user/u1"

    def test_omitted_node_id_is_skipped(self):
        """Batch endpoints carry ids in the body, not the path."""
        url = build_url(BASE, "user", None, "followed", "concept")
        assert url == f"{BASE}/user/followed/concept"
        assert "//" not in url.replace("https://", "")

    def test_trailing_slash_on_base(self):
        assert build_url(BASE + "/", "user", "u1") == f"{BASE}/user/u1"

    def test_scoped_url(self):
        url = build_scoped_url(BASE, "license", "l1", "concept", "c1", "followed", "user")
        assert url == f"{BASE}/license/l1/concept/c1/followed/user"


class TestEncodeParams:
    def test_booleans_lowercase(self):
        assert encode_params({"noEvent": False, "waitForPurge": True}) == [
            ("noEvent", "false"),
            ("waitForPurge", "true"),
        ]

    def test_numbers_stringified(self):
        assert encode_params({"page": 2, "limit": 500}) == [("page", "2"), ("limit", "500")]

    def test_none_omitted(self):
        assert encode_params({"a": None, "b": "x"}) == [("b", "x")]

    def test_empty(self):
        assert encode_params(None) == []
        assert encode_params({}) == []


class TestBuildRequest:
    def test_post_body_is_json(self):
        req = build_request("post", f"{BASE}/license", data={"uuid": "l1"})
        assert req.method == "POST"
        assert json.loads(req.content) == {"uuid": "l1"}
        assert "Content-Length" not in req.headers

    def test_post_without_body_locally_sends_nothing(self):
        req = build_request("DELETE", f"{BASE}/license/l1")
        assert req.content is None

    def test_post_without_body_framed_sends_empty_object(self):
        req = build_request("DELETE", f"{BASE}/license/l1", exact_content_length=True)
        assert req.content == b"{}"
        assert req.headers["Content-Length"] == "2"

    def test_framed_content_length_matches_bytes(self):
        data = {"uuid": "l1", "name": "Société"}
        req = build_request("PUT", f"{BASE}/license/l1", data=data, exact_content_length=True)
        assert req.headers["Content-Length"] == str(len(req.content))

    def test_get_folds_data_into_query(self):
        req = build_request("GET", f"{BASE}/user/u1", data={"fields": "name"}, params={"page": 1})
        assert req.content is None
        assert req.params == [("page", "1"), ("fields", "name")]

    def test_get_framed_sets_zero_length(self):
        req = build_request("GET", f"{BASE}/user/u1", exact_content_length=True)
        assert req.headers["Content-Length"] == "0"
        assert req.content is None

    def test_params_on_mutations(self):
        req = build_request("POST", f"{BASE}/user", data={}, params={"noEvent": True})
        assert req.params == [("noEvent", "true")]

    def test_api_key_header(self):
        req = build_request("GET", BASE, api_key="k")
        assert req.headers[API_KEY_HEADER] == "k"
        assert API_KEY_HEADER not in build_request("GET", BASE).headers


class TestRelationshipRequestBuilder:
    def test_binds_settings(self):
        builder = RelationshipRequestBuilder(
            MyFTSettings(api_url=BASE, api_key="secret", environment="production")
        )
        req = builder.relationship("POST", "group", "g1", "member", "user", data=[{"uuid": "u1"}])

        assert req.url == f"{BASE}/group/g1/member/user"
        assert req.headers[API_KEY_HEADER] == "secret"
        assert req.headers["Content-Length"] == str(len(req.content))

    def test_scoped(self):
        builder = RelationshipRequestBuilder(MyFTSettings(api_url=BASE))
        req = builder.scoped("GET", "license", "l1", "concept", "c1", "followed", "group")
        assert req.url == f"{BASE}/license/l1/concept/c1/followed/group"
        assert req.method == "GET"
