# Tests for urls.build_url
# Created: 2026-10-18

from urllib.parse import parse_qs, urlsplit

from oauthflow.urls import build_url


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query, keep_blank_values=True)


class TestBuildUrl:
    def test_params_are_present(self):
        url = build_url("https://p/authorize", {"client_id": "cid", "response_type": "code"})
        query = _query(url)
        assert query["client_id"] == ["cid"]
        assert query["response_type"] == ["code"]
        assert "scope" not in query

    def test_base_url_kept(self):
        url = build_url("https://p/authorize", {"a": "1"})
        parts = urlsplit(url)
        assert parts.scheme == "https"
        assert parts.netloc == "p"
        assert parts.path == "/authorize"

    def test_scope_joined_with_space(self):
        url = build_url("https://p/authorize", {}, ["read", "write:org"])
        assert _query(url)["scope"] == ["read write:org"]

    def test_empty_scope_omitted(self):
        assert "scope" not in _query(build_url("https://p/authorize", {"a": "b"}, []))

    def test_values_percent_encoded(self):
        url = build_url(
            "https://p/authorize",
            {"redirect_uri": "http://localhost:3000/login/demo/authorized?x=1&y=2"},
        )
        assert "localhost:3000/login" not in url
        assert _query(url)["redirect_uri"] == [
            "http://localhost:3000/login/demo/authorized?x=1&y=2"
        ]

    def test_numbers_and_booleans(self):
        query = _query(build_url("https://p/a", {"max_age": 60, "prompt": True, "x": False}))
        assert query["max_age"] == ["60"]
        assert query["prompt"] == ["true"]
        assert query["x"] == ["false"]

    def test_existing_query_preserved(self):
        query = _query(build_url("https://p/a?tenant=t1", {"client_id": "cid"}))
        assert query["tenant"] == ["t1"]
        assert query["client_id"] == ["cid"]

    def test_deterministic(self):
        params = {"b": "2", "a": "1"}
        assert build_url("https://p/a", params, ["s"]) == build_url("https://p/a", params, ["s"])
