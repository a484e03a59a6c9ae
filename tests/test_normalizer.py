"""Tests for address normalization."""

from urllib.parse import parse_qs, urlparse

import pytest

from webrelay.errors import InvalidInput
from webrelay.models import TargetURL
from webrelay.normalizer import looks_like_host, normalize_address, search_url


class TestNormalizeAddress:
    def test_bare_domain_gets_https(self):
        """A bare domain should be prefixed with https://."""
        assert str(normalize_address("example.com")) == "https://example.com"

    def test_domain_with_path_gets_https(self):
        """A domain with a path should keep its path."""
        assert str(normalize_address("example.com/docs?page=2")) == "https://example.com/docs?page=2"

    def test_http_url_accepted_as_is(self):
        """An explicit http:// URL should not be changed."""
        assert str(normalize_address("http://example.com/a")) == "http://example.com/a"

    def test_https_prefix_is_case_insensitive(self):
        """Scheme detection should ignore case."""
        assert str(normalize_address("HTTPS://Example.com")) == "HTTPS://Example.com"

    def test_strips_surrounding_whitespace(self):
        """Leading and trailing whitespace should be ignored."""
        assert str(normalize_address("  example.org  ")) == "https://example.org"

    def test_localhost_with_port(self):
        """localhost with a port should be treated as an address."""
        assert str(normalize_address("localhost:8080/app")) == "https://localhost:8080/app"

    def test_ipv4_address(self):
        """An IPv4 address should be treated as an address."""
        assert str(normalize_address("192.168.1.10")) == "https://192.168.1.10"

    def test_search_query_round_trips(self):
        """Free text should become a search URL carrying the text."""
        url = normalize_address("quick brown fox")
        query = parse_qs(urlparse(str(url)).query)
        assert query["q"] == ["quick brown fox"]

    def test_single_word_is_a_search(self):
        """A word without a TLD should be searched, not fetched."""
        url = normalize_address("python")
        assert parse_qs(urlparse(str(url)).query)["q"] == ["python"]

    def test_domain_with_spaces_is_a_search(self):
        """Text containing whitespace should never be treated as a host."""
        url = normalize_address("what is example.com")
        assert parse_qs(urlparse(str(url)).query)["q"] == ["what is example.com"]

    def test_email_address_is_a_search(self):
        """An email address is searched, not fetched with credentials."""
        url = normalize_address("ann@example.com")
        assert parse_qs(urlparse(str(url)).query)["q"] == ["ann@example.com"]

    def test_search_engine_override(self):
        """The search engine can be chosen per call."""
        url = normalize_address("cats", search_engine="duckduckgo")
        assert str(url).startswith("https://duckduckgo.com/?")

    def test_empty_input_is_invalid(self):
        """Empty input should raise InvalidInput."""
        with pytest.raises(InvalidInput):
            normalize_address("   ")

    def test_unparsable_url_is_invalid(self):
        """A URL that cannot be parsed should raise InvalidInput."""
        with pytest.raises(InvalidInput):
            normalize_address("http://example.com:notaport/")

    def test_missing_host_is_invalid(self):
        """A scheme without a host should raise InvalidInput."""
        with pytest.raises(InvalidInput):
            normalize_address("http://")


class TestLooksLikeHost:
    def test_tld_suffix(self):
        assert looks_like_host("news.example.co.uk")

    def test_port_is_ignored(self):
        assert looks_like_host("example.com:8443")

    def test_no_dot(self):
        assert not looks_like_host("intranet")

    def test_whitespace(self):
        assert not looks_like_host("example .com")


class TestSearchUrl:
    def test_unknown_engine(self):
        """An unknown engine name should raise InvalidInput."""
        with pytest.raises(InvalidInput):
            search_url("x", search_engine="altavista")

    def test_encodes_query(self):
        """Special characters should be URL-encoded."""
        url = search_url("a&b=c", search_engine="bing")
        assert parse_qs(urlparse(url).query)["q"] == ["a&b=c"]


class TestTargetURL:
    def test_origin_drops_path_query_fragment(self):
        """Origin should only keep scheme, host and port."""
        url = TargetURL.parse("https://example.com:8443/a/b?x=1#frag")
        assert url.origin == "https://example.com:8443"

    def test_origin_drops_userinfo(self):
        """Credentials should not leak into the origin."""
        assert TargetURL.parse("https://user:pw@example.com/").origin == "https://example.com"

    def test_host(self):
        assert TargetURL.parse("https://Example.com/x").host == "example.com"

    def test_rejects_other_schemes(self):
        """Only http and https are accepted."""
        with pytest.raises(InvalidInput):
            TargetURL.parse("ftp://example.com/file")

    def test_rejects_relative(self):
        """Relative references are not TargetURLs."""
        with pytest.raises(InvalidInput):
            TargetURL.parse("/just/a/path")

    def test_is_immutable(self):
        """TargetURL should be frozen."""
        url = TargetURL.parse("https://example.com")
        with pytest.raises(AttributeError):
            url.url = "https://other.com"
