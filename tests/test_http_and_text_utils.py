import pytest
import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

import utils.http_utils as http_utils
from core.rule_engine import evaluate
from core.signal_extractor import extract
from utils.error_utils import UpstreamFetchError, safe_execute
from utils.text_utils import (
    clean_html_to_text,
    count_words,
    strip_code_fence,
    strip_tags,
    truncate_text,
)


class _FakeResponse:
    def __init__(self, status_code=200, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self.headers = {"Content-Type": "text/html; charset=utf-8"}
        self.encoding = "utf-8"


def _patch_get(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, timeout=None, headers=None):
        calls.append({"url": url, "timeout": timeout, "headers": headers})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(http_utils.requests, "get", fake_get)
    return calls


def test_fetch_markup_returns_body_with_fixed_user_agent(monkeypatch):
    monkeypatch.delenv("FETCH_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("FETCH_USER_AGENT", raising=False)
    calls = _patch_get(monkeypatch, _FakeResponse(text="<html></html>"))

    assert http_utils.fetch_markup("https://example.com") == "<html></html>"
    assert len(calls) == 1
    assert calls[0]["headers"]["User-Agent"] == http_utils.DEFAULT_USER_AGENT
    assert calls[0]["timeout"] is None


def test_fetch_markup_timeout_from_env(monkeypatch):
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "7.5")
    calls = _patch_get(monkeypatch, _FakeResponse(text="ok"))
    http_utils.fetch_markup("https://example.com")
    assert calls[0]["timeout"] == 7.5


def test_fetch_markup_non_2xx_raises_with_status(monkeypatch):
    calls = _patch_get(monkeypatch, _FakeResponse(status_code=404, reason="Not Found"))
    with pytest.raises(UpstreamFetchError) as exc_info:
        http_utils.fetch_markup("https://example.com/missing")
    assert exc_info.value.status_code == 404
    assert "404" in str(exc_info.value)
    # no retries
    assert len(calls) == 1


def _real_response(body, content_type):
    resp = requests.Response()
    resp.status_code = 200
    resp.reason = "OK"
    resp.headers = CaseInsensitiveDict({"Content-Type": content_type})
    resp._content = body
    # what the HTTP adapter does for a live response
    resp.encoding = get_encoding_from_headers(resp.headers)
    return resp


def test_fetch_markup_without_charset_decodes_utf8(monkeypatch):
    markup = "<html><head><title>日本語のタイトル</title></head></html>"
    _patch_get(monkeypatch, _real_response(markup.encode("utf-8"), "text/html"))

    signals = extract(http_utils.fetch_markup("https://example.jp"), "https://example.jp")
    assert signals.title == "日本語のタイトル"

    short_title = [s for s in evaluate(signals) if s.title == "タイトルが短すぎます"]
    assert "現在のタイトル長: 8文字" in short_title[0].description


def test_fetch_markup_honours_declared_charset(monkeypatch):
    markup = "<title>こんにちは</title>"
    _patch_get(monkeypatch, _real_response(markup.encode("shift_jis"), "text/html; charset=Shift_JIS"))
    assert http_utils.fetch_markup("https://example.jp") == markup


def test_fetch_markup_network_error_raises(monkeypatch):
    _patch_get(monkeypatch, error=requests.ConnectionError("dns failure"))
    with pytest.raises(UpstreamFetchError) as exc_info:
        http_utils.fetch_markup("https://unreachable.invalid")
    assert exc_info.value.status_code is None


def test_strip_tags_and_count_words():
    assert strip_tags("<p>Hello <b>big</b> world</p>") == "Hello big world"
    assert strip_tags(None) == ""
    assert count_words("  one\ttwo\nthree  ") == 3
    assert count_words("") == 0


def test_clean_html_to_text_drops_scripts_and_styles():
    html = """
    <html><head><style>.x { color: red; }</style><script>track();</script></head>
    <body><h1>Title</h1><p>Some <strong>content</strong> here.</p></body></html>
    """
    text = clean_html_to_text(html)
    assert "Title" in text
    assert "Some content here." in text
    assert "track()" not in text
    assert "color: red" not in text


def test_truncate_text_behaviour():
    assert truncate_text("abcdefghij", 20) == "abcdefghij"
    assert truncate_text("abcdefghij", 5) == "abcde"
    assert truncate_text("abc", 0) == ""
    assert truncate_text(None, 5) is None


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence("```markdown\n# Title\n\nBody\n```\n") == "# Title\n\nBody"
    assert strip_code_fence("# No fence") == "# No fence"
    assert strip_code_fence(None) == ""


def test_safe_execute_only_absorbs_listed_errors():
    @safe_execute("fallback", KeyError)
    def lookup(key):
        return {"a": "value"}[key]

    assert lookup("a") == "value"
    assert lookup("missing") == "fallback"

    @safe_execute(0, KeyError)
    def explode():
        raise RuntimeError("not absorbed")

    with pytest.raises(RuntimeError):
        explode()
