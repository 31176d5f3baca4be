"""
Tests for query parameter extraction and request helpers.
"""

from starlette.requests import Request

from tg_redirect.core.utils import get_client_ip, hash_ip
from tg_redirect.core.validators import (
    extract_extra_params,
    extract_utm_params,
    is_dangerous_param,
    sanitize_code_for_log,
    sanitize_param_key,
    sanitize_param_value,
)


def make_request(headers=None, client=("198.51.100.1", 12345)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestUTMExtraction:

    def test_extracts_known_keys(self):
        utm = extract_utm_params({
            "utm_source": "linkedin",
            "utm_medium": "cpc",
            "utm_campaign": "spring",
            "other": "x",
        })
        assert utm.utm_source == "linkedin"
        assert utm.utm_medium == "cpc"
        assert utm.utm_campaign == "spring"
        assert utm.utm_term is None
        assert utm.present() == {"utm_source": "linkedin", "utm_medium": "cpc", "utm_campaign": "spring"}

    def test_empty_values_ignored(self):
        assert extract_utm_params({"utm_source": ""}).present() == {}

    def test_values_sanitized(self):
        utm = extract_utm_params({"utm_source": "<script>'x'</script>"})
        assert utm.utm_source == "scriptx/script"


class TestExtraParams:

    def test_disjoint_from_utm(self):
        extra = extract_extra_params({"utm_source": "linkedin", "ref": "ad1", "gclid": "abc"})
        assert extra == {"ref": "ad1", "gclid": "abc"}

    def test_dangerous_keys_dropped(self):
        extra = extract_extra_params({
            "onclick": "alert(1)",
            "__proto__": "x",
            "constructor": "x",
            "prototype": "x",
            "javascript:alert": "x",
            "ok": "yes",
        })
        assert extra == {"ok": "yes"}

    def test_keys_sanitized(self):
        assert extract_extra_params({"my key!": "v"}) == {"mykey": "v"}
        assert extract_extra_params({"!!!": "v"}) == {}

    def test_is_dangerous_param(self):
        assert is_dangerous_param("onload")
        assert is_dangerous_param("data:text")
        assert not is_dangerous_param("ref")


class TestSanitizers:

    def test_value_length_limit(self):
        assert len(sanitize_param_value("x" * 1000)) == 256

    def test_key_length_limit(self):
        assert len(sanitize_param_key("k" * 100)) == 64

    def test_code_for_log(self):
        assert sanitize_code_for_log("A" * 100) == "A" * 20
        assert sanitize_code_for_log(None) == ""


class TestHashIP:

    def test_deterministic_and_truncated(self):
        first = hash_ip("203.0.113.7", "salt")
        assert first == hash_ip("203.0.113.7", "salt")
        assert len(first) == 16
        assert all(ch in "0123456789abcdef" for ch in first)

    def test_salt_changes_hash(self):
        assert hash_ip("203.0.113.7", "salt-a") != hash_ip("203.0.113.7", "salt-b")

    def test_port_ignored(self):
        assert hash_ip("203.0.113.7:5555", "salt") == hash_ip("203.0.113.7", "salt")

    def test_ipv6_kept_whole(self):
        assert hash_ip("2001:db8::1", "salt") != hash_ip("2001:db8::2", "salt")

    def test_unknown(self):
        assert hash_ip(None, "salt") == "unknown"
        assert hash_ip("", "salt") == "unknown"
        assert hash_ip("unknown", "salt") == "unknown"


class TestClientIP:

    def test_forwarded_for_first_entry(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_header_precedence(self):
        request = make_request({"X-Real-IP": "203.0.113.8", "CF-Connecting-IP": "203.0.113.9"})
        assert get_client_ip(request) == "203.0.113.8"

        request = make_request({"CF-Connecting-IP": "203.0.113.9"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_socket_peer(self):
        assert get_client_ip(make_request()) == "198.51.100.1"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) == "unknown"
