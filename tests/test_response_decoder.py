"""Unit tests for response-body classification."""
import httpx
import pytest

from triggers.response_decoder import (
    DecodeError,
    Empty,
    Parsed,
    Raw,
    decode,
    is_json_content_type,
)

JSON = {"Content-Type": "application/json; charset=utf-8"}


def test_204_is_empty_regardless_of_headers():
    resp = httpx.Response(204, headers=JSON, content=b'{"value": []}')
    assert decode(resp) == Empty()


def test_202_is_empty():
    assert decode(httpx.Response(202, headers=JSON)) == Empty()


def test_whitespace_body_is_empty():
    assert decode(httpx.Response(200, headers=JSON, content=b"  \n ")) == Empty()


def test_plain_text_is_raw():
    resp = httpx.Response(200, headers={"Content-Type": "text/plain"}, content=b"hello")
    assert decode(resp) == Raw("hello")


def test_json_is_parsed():
    resp = httpx.Response(200, headers=JSON, content=b'{"value":[{"id":"a"}]}')

    body = decode(resp)

    assert isinstance(body, Parsed)
    assert len(body.data["value"]) == 1
    assert body.data["value"][0]["id"] == "a"


def test_vendor_json_type_is_parsed():
    resp = httpx.Response(200, headers={"Content-Type": "application/odata+json"}, content=b"[1]")
    assert decode(resp) == Parsed([1])


def test_malformed_json_raises_with_snippet():
    bad = b'{"value": [' + b"x" * 2000
    resp = httpx.Response(200, headers=JSON, content=bad)

    with pytest.raises(DecodeError) as ctx:
        decode(resp)

    assert ctx.value.status_code == 200
    assert len(ctx.value.snippet) == 800
    assert ctx.value.snippet.startswith('{"value": [')


def test_no_content_type_parses_json_or_falls_back_to_raw():
    assert decode(httpx.Response(200, content=b'{"id": "a"}')) == Parsed({"id": "a"})
    assert decode(httpx.Response(200, content=b"<html/>")) == Raw("<html/>")


@pytest.mark.parametrize("value,expected", [
    ("application/json", True),
    ("Application/JSON; charset=utf-8", True),
    ("application/problem+json", True),
    ("text/plain", False),
    ("text/html; charset=utf-8", False),
])
def test_is_json_content_type(value, expected):
    assert is_json_content_type(value) is expected
