import json

import httpx
import pytest

from libs.http_request.exceptions import ConstructionError
from libs.http_request.models import (
    Completion,
    Method,
    ParameterEncoding,
    PreparedRequest,
    ResponseMeta,
    parse_content_length,
)


class TestMethod:
    def test_body_methods(self):
        assert Method.POST.carries_body is True
        assert Method.PUT.carries_body is True
        assert Method.PATCH.carries_body is True
        assert Method.GET.carries_body is False
        assert Method.HEAD.carries_body is False
        assert Method.DELETE.carries_body is False


class TestPreparedRequest:
    def test_query_parameters(self):
        prepared = PreparedRequest.build("GET", "https://example.com/search?lang=en", {"q": "a b", "page": 2})
        params = httpx.URL(prepared.url).params
        assert params["lang"] == "en"
        assert params["q"] == "a b"
        assert params["page"] == "2"
        assert prepared.body is None

    def test_form_body(self):
        prepared = PreparedRequest.build(Method.POST, "https://example.com/form", {"name": "x", "n": 1})
        assert prepared.url == "https://example.com/form"
        assert prepared.body == b"name=x&n=1"
        assert prepared.headers["Content-Type"].startswith("application/x-www-form-urlencoded")

    def test_post_without_parameters_sends_empty_body(self):
        prepared = PreparedRequest.build("POST", "https://example.com/form")
        assert prepared.body == b""
        assert "Content-Type" not in prepared.headers

    def test_json_body(self):
        prepared = PreparedRequest.build(
            "PUT", "https://example.com/items/1", {"name": "x"}, encoding=ParameterEncoding.JSON
        )
        assert json.loads(prepared.body) == {"name": "x"}
        assert prepared.headers["Content-Type"] == "application/json"

    def test_json_on_get_rejected(self):
        with pytest.raises(ConstructionError):
            PreparedRequest.build("GET", "https://example.com", {"a": 1}, encoding=ParameterEncoding.JSON)

    def test_unserializable_json_rejected(self):
        with pytest.raises(ConstructionError):
            PreparedRequest.build("POST", "https://example.com", {"a": object()}, encoding=ParameterEncoding.JSON)

    def test_connection_close_default(self):
        prepared = PreparedRequest.build("GET", "https://example.com", headers={"X-Request-Id": "123"})
        assert prepared.headers == {"X-Request-Id": "123", "Connection": "close"}

    def test_caller_headers_override(self):
        prepared = PreparedRequest.build(
            "POST",
            "https://example.com",
            {"a": 1},
            headers={"connection": "keep-alive", "content-type": "text/plain"},
        )
        assert prepared.headers == {"connection": "keep-alive", "content-type": "text/plain"}

    @pytest.mark.parametrize("url", ["example.com/path", "", "/relative"])
    def test_malformed_urls(self, url):
        with pytest.raises(ConstructionError):
            PreparedRequest.build("GET", url)

    def test_unknown_method(self):
        with pytest.raises(ConstructionError):
            PreparedRequest.build("FETCH", "https://example.com")


class TestResponseMeta:
    def test_charset(self):
        response = ResponseMeta(200, {"Content-Type": "text/html; charset=ISO-8859-1"}, "https://example.com")
        assert response.charset == "ISO-8859-1"
        assert response.ok is True

    def test_no_charset(self):
        response = ResponseMeta(404, {"content-type": "application/octet-stream"}, "https://example.com")
        assert response.charset is None
        assert response.ok is False


class TestParseContentLength:
    @pytest.mark.parametrize(
        "value, expected",
        [("123", 123), (" 42 ", 42), ("0", 0), (None, None), ("", None), ("abc", None), ("-1", None)],
    )
    def test_parse(self, value, expected):
        assert parse_content_length(value) == expected


def test_completion_ok():
    assert Completion("https://example.com", None, b"", None).ok is True
    assert Completion("https://example.com", None, None, RuntimeError()).ok is False
