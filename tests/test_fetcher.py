"""Tests for HttpFetcher."""

import httpx
import pytest

from webrelay.core import FetchResult, FetchStatus, HttpFetcher, Response


@pytest.fixture
async def fetcher():
    fetcher = HttpFetcher(timeout=15.0)
    yield fetcher
    await fetcher.close()


class TestHttpFetcher:
    async def test_fetch_returns_response_fields(self, fetcher, httpx_mock):
        """Verify all response fields are populated."""
        httpx_mock.add_response(url="https://example.com/", html="<h1>Example Domain</h1>")

        response = await fetcher.fetch("https://example.com/")

        assert isinstance(response, Response)
        assert response.status == 200
        assert response.url == "https://example.com/"
        assert b"Example Domain" in response.content
        assert response.reason == "OK"
        assert "text/html" in response.headers.get("content-type", "")

    async def test_sends_browser_identity(self, fetcher, httpx_mock):
        """Requests should look like a desktop browser."""
        httpx_mock.add_response(url="https://example.com/")

        await fetcher.fetch("https://example.com/")

        request = httpx_mock.get_request()
        assert request.headers["User-Agent"].startswith("Mozilla/5.0")
        assert "text/html" in request.headers["Accept"]
        assert request.headers["Accept-Language"].startswith("en-US")

    async def test_post_sends_form_data(self, fetcher, httpx_mock):
        """POST should send url-encoded form fields."""
        httpx_mock.add_response(url="https://example.com/login", method="POST")

        await fetcher.fetch("https://example.com/login", method="POST", form_data={"q": "a b"})

        request = httpx_mock.get_request()
        assert request.method == "POST"
        assert request.content == b"q=a+b"

    async def test_reuses_client(self, fetcher, httpx_mock):
        """One client should serve every request."""
        httpx_mock.add_response(url="https://a.example/")
        httpx_mock.add_response(url="https://b.example/")

        await fetcher.fetch("https://a.example/")
        client = fetcher._client
        await fetcher.fetch("https://b.example/")

        assert fetcher._client is client


class TestLoad:
    async def test_success(self, fetcher, httpx_mock):
        """A 2xx response should be a success."""
        httpx_mock.add_response(url="https://example.com/", html="<p>hi</p>")

        result = await fetcher.load("https://example.com/")

        assert result.status is FetchStatus.SUCCESS
        assert result.http_status == 200
        assert result.is_html
        assert result.text == "<p>hi</p>"

    async def test_empty_body_is_still_success(self, fetcher, httpx_mock):
        """An empty 2xx body should still be a success."""
        httpx_mock.add_response(url="https://example.com/empty", status_code=204)

        result = await fetcher.load("https://example.com/empty")

        assert result.ok
        assert result.body == b""

    async def test_follows_redirects_and_reports_final_url(self, fetcher, httpx_mock):
        """The final URL after redirects should be reported."""
        httpx_mock.add_response(
            url="http://example.com/old",
            status_code=301,
            headers={"Location": "https://www.example.com/new/"},
        )
        httpx_mock.add_response(url="https://www.example.com/new/", html="moved")

        result = await fetcher.load("http://example.com/old")

        assert result.ok
        assert result.url == "https://www.example.com/new/"

    async def test_404_is_upstream_error(self, fetcher, httpx_mock):
        """A 404 should be an upstream error carrying status and reason."""
        httpx_mock.add_response(url="https://example.com/missing", status_code=404)

        result = await fetcher.load("https://example.com/missing")

        assert result.status is FetchStatus.UPSTREAM_ERROR
        assert result.http_status == 404
        assert result.reason == "Not Found"

    async def test_500_is_not_retried(self, fetcher, httpx_mock):
        """Upstream errors should be returned after a single request."""
        httpx_mock.add_response(url="https://example.com/", status_code=500)

        result = await fetcher.load("https://example.com/")

        assert result.status is FetchStatus.UPSTREAM_ERROR
        assert len(httpx_mock.get_requests()) == 1

    async def test_connection_error_is_network_error(self, fetcher, httpx_mock):
        """A refused connection should be a network error."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"), url="https://down.example/")

        result = await fetcher.load("https://down.example/")

        assert result.status is FetchStatus.NETWORK_ERROR
        assert result.http_status == 0
        assert "Connection refused" in result.error

    async def test_timeout_is_network_error(self, fetcher, httpx_mock):
        """A timeout should be a network error, not a hang."""
        httpx_mock.add_exception(httpx.ReadTimeout("read timed out"), url="https://slow.example/")

        result = await fetcher.load("https://slow.example/")

        assert result.status is FetchStatus.NETWORK_ERROR
        assert result.error == "timed out after 15s"


class TestFetchResult:
    def test_text_uses_declared_charset(self):
        """Body should be decoded with the declared charset."""
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.com",
            content_type="text/html; charset=iso-8859-1",
            body="café".encode("iso-8859-1"),
        )
        assert result.text == "café"

    def test_text_uses_meta_charset(self):
        """Without a header charset, <meta charset> decides the decoding."""
        body = '<html><head><meta charset="shift_jis"><title>日本語</title></head></html>'
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.jp",
            content_type="text/html",
            body=body.encode("shift_jis"),
        )
        assert result.charset == "shift_jis"
        assert "<title>日本語</title>" in result.text

    def test_text_uses_http_equiv_charset(self):
        """The http-equiv Content-Type form of <meta> is honoured too."""
        body = (
            '<meta http-equiv="Content-Type" content="text/html; charset=windows-1251">'
            "<p>Привет</p>"
        )
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.ru",
            content_type="text/html",
            body=body.encode("windows-1251"),
        )
        assert "<p>Привет</p>" in result.text

    def test_header_charset_wins_over_meta(self):
        """A charset in the Content-Type header takes precedence."""
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.com",
            content_type="text/html; charset=utf-8",
            body='<meta charset="iso-8859-1"><p>café</p>'.encode("utf-8"),
        )
        assert "café" in result.text

    def test_meta_charset_ignored_for_non_html(self):
        """Only HTML bodies are sniffed."""
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.com/x.txt",
            content_type="text/plain",
            body=b'<meta charset="shift_jis">',
        )
        assert result.charset == "utf-8"

    def test_text_handles_unknown_charset(self):
        """An unknown charset should fall back to UTF-8."""
        result = FetchResult(
            status=FetchStatus.SUCCESS,
            url="https://example.com",
            content_type="text/html; charset=x-bogus",
            body=b"\xff\xfeok",
        )
        assert result.text.endswith("ok")

    def test_is_html(self):
        assert FetchResult(FetchStatus.SUCCESS, "https://e.com", content_type="Text/HTML").is_html
        assert not FetchResult(FetchStatus.SUCCESS, "https://e.com", content_type="image/png").is_html

