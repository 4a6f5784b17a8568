import pytest

from core.exceptions import InvalidTargetUrl, UrlConstructionError
from core.router import PathRewriter, RewrittenPath, validate_target_url

BASE = "https://api.example.com"


@pytest.fixture
def rewriter():
    return PathRewriter(prefix="/proxy", aliases={"/proxy/goog": "/proxy/v1"}, reserved_query_key="key")


class TestNormalize:
    def test_alias_is_rewritten(self, rewriter):
        assert rewriter.normalize("/proxy/goog/chat/completions") == "/proxy/v1/chat/completions"

    def test_canonical_path_unchanged(self, rewriter):
        assert rewriter.normalize("/proxy/v1/models") == "/proxy/v1/models"

    def test_normalize_is_idempotent(self, rewriter):
        once = rewriter.normalize("/proxy/goog/models")
        assert rewriter.normalize(once) == once

    def test_alias_requires_segment_boundary(self, rewriter):
        assert rewriter.normalize("/proxy/google/models") == "/proxy/google/models"


class TestIsProxyPath:
    @pytest.mark.parametrize("path", ["/proxy", "/proxy/", "/proxy/v1/models", "/proxy/goog"])
    def test_proxy_paths(self, rewriter, path):
        assert rewriter.is_proxy_path(path)

    @pytest.mark.parametrize("path", ["/", "/status", "/proxyfoo", "/v1/proxy"])
    def test_other_paths(self, rewriter, path):
        assert not rewriter.is_proxy_path(path)


class TestFilterQuery:
    def test_reserved_key_is_dropped(self, rewriter):
        assert rewriter.filter_query("key=SECRET&foo=bar") == "foo=bar"

    def test_duplicates_keep_first_position_and_last_value(self, rewriter):
        assert rewriter.filter_query("a=1&b=2&a=3") == "a=3&b=2"

    def test_blank_values_kept(self, rewriter):
        assert rewriter.filter_query("flag=&x=1") == "flag=&x=1"

    def test_empty_query(self, rewriter):
        assert rewriter.filter_query("") == ""
        assert rewriter.filter_query("key=only") == ""


class TestRewrite:
    def test_prefix_stripped(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/v1/models", "")
        assert rewritten.relative_path == "/v1/models"
        assert rewritten.reference == "/v1/models"

    def test_bare_prefix_gives_empty_relative_path(self, rewriter):
        assert rewriter.rewrite("/proxy").relative_path == ""

    def test_query_appended_to_reference(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/v1/models", "key=SECRET&foo=bar")
        assert rewritten.reference == "/v1/models?foo=bar"

    def test_non_proxy_path_rejected(self, rewriter):
        with pytest.raises(ValueError):
            rewriter.rewrite("/status")


class TestResolve:
    def test_alias_resolves_to_canonical_upstream(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/goog/chat/completions")
        assert rewriter.resolve(BASE, rewritten) == "https://api.example.com/v1/chat/completions"

    def test_reserved_key_not_forwarded(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/v1/models", "key=SECRET&foo=bar")
        assert rewriter.resolve(BASE, rewritten) == "https://api.example.com/v1/models?foo=bar"

    def test_absolute_path_replaces_base_path(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/v1/models")
        assert rewriter.resolve("https://api.example.com/api/", rewritten) == "https://api.example.com/v1/models"

    def test_base_host_and_scheme_retained(self, rewriter):
        rewritten = rewriter.rewrite("/proxy/images/cat.png")
        assert rewriter.resolve("http://10.0.0.5:8080", rewritten) == "http://10.0.0.5:8080/images/cat.png"

    def test_invalid_reference_raises(self, rewriter):
        with pytest.raises(UrlConstructionError):
            rewriter.resolve(BASE, RewrittenPath("/proxy/bad", "/bad\x01path", ""))


class TestValidateTargetUrl:
    @pytest.mark.parametrize(
        "url",
        ["https://api.example.com", "http://localhost:9000/base/", "https://example.com/v1?x=1"],
    )
    def test_absolute_urls_returned_verbatim(self, url):
        assert validate_target_url(url) == url

    @pytest.mark.parametrize("url", ["file:///x", "mailto:a@b"])
    def test_host_less_absolute_urls_accepted(self, url):
        assert validate_target_url(url) == url

    @pytest.mark.parametrize("url", ["", None, "not a url", "/relative/path", "http://", "https://"])
    def test_invalid_urls_rejected(self, url):
        with pytest.raises(InvalidTargetUrl):
            validate_target_url(url)
