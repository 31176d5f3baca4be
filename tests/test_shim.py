"""
Tests for Telegram link building and the shim page.
"""

from tg_redirect.services.shim import (
    build_deep_link,
    build_fallback_url,
    build_redirect_url,
    render_shim_page,
)


class TestLinks:

    def test_bot_links(self):
        assert build_redirect_url("bot", "SalesBot", "abc123") == "https://t.me/SalesBot?start=abc123"
        assert build_redirect_url("bot", "SalesBot") == "https://t.me/SalesBot"
        assert build_deep_link("bot", "SalesBot", "abc123") == "tg://resolve?domain=SalesBot&start=abc123"

    def test_public_links_ignore_start_param(self):
        assert build_redirect_url("public", "Channel", "abc123") == "https://t.me/Channel"
        assert build_deep_link("public", "Channel") == "tg://resolve?domain=Channel"

    def test_invite_links(self):
        assert build_fallback_url("invite", "ABCdef123456") == "https://t.me/+ABCdef123456"
        assert build_deep_link("invite", "ABCdef123456") == "tg://join?invite=ABCdef123456"

    def test_values_are_quoted(self):
        assert build_redirect_url("bot", "SalesBot", "a b&c") == "https://t.me/SalesBot?start=a%20b%26c"


class TestShimPage:

    def test_renders_links(self):
        html = render_shim_page("bot", "SupportBot", start_param="abcdefghijklmnop", title="Support")

        assert "<title>Support</title>" in html
        assert 'href="https://t.me/SupportBot?start=abcdefghijklmnop"' in html
        assert "tg://resolve?domain=SupportBot" in html
        assert "ref: abcdefghijkl..." in html

    def test_no_ref_tag_without_start_param(self):
        html = render_shim_page("public", "Channel")
        assert "ref:" not in html

    def test_title_is_escaped(self):
        html = render_shim_page("public", "Channel", title='<script>alert("x")</script>')
        assert "<script>alert" not in html
        assert "&lt;script&gt;" in html

    def test_fallback_delay(self):
        assert "var fallbackDelay = 2500;" in render_shim_page("public", "Channel", fallback_delay=2500)
