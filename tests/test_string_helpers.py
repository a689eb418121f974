"""Small text helpers used by forms and the OAuth paste-back flow."""

from __future__ import annotations

from uwezo.services.profile_provisioning import split_full_name
from uwezo.utils.string_helpers import blank_to_none, extract_auth_code, initials, join_url


def test_extract_code_from_redirect_url() -> None:
    url = "https://uwezo.example.com/protected?code=abc123&state=xyz"
    assert extract_auth_code(url) == "abc123"


def test_bare_code_is_returned_as_is() -> None:
    assert extract_auth_code("  abc123 ") == "abc123"


def test_url_without_code() -> None:
    assert extract_auth_code("https://uwezo.example.com/protected?error=access_denied") is None
    assert extract_auth_code("   ") is None


def test_join_url() -> None:
    assert join_url("https://x.io/", "apply", "j1") == "https://x.io/apply/j1"
    assert join_url("https://x.io", "apply", "") == "https://x.io/apply/"


def test_blank_to_none() -> None:
    assert blank_to_none("  ") is None
    assert blank_to_none(None) is None
    assert blank_to_none(" Acme ") == "Acme"


def test_split_full_name() -> None:
    assert split_full_name("Amina Wanjiru Odhiambo") == ("Amina", "Wanjiru Odhiambo")
    assert split_full_name("Cher") == ("Cher", None)
    assert split_full_name("  ") == (None, None)


def test_initials() -> None:
    assert initials("Amina Wanjiru Odhiambo") == "AO"
    assert initials("cher") == "C"
    assert initials("   ") == "?"
