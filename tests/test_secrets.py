"""Tests for secret loading helpers."""
from __future__ import annotations

import pytest

from padayon.security.secrets import MissingSecretError, is_placeholder, redact, require_secret


@pytest.mark.parametrize("value", [None, "", "   ", "changeme", "Your-Key-Here"])
def test_placeholders(value) -> None:
    assert is_placeholder(value)


def test_require_secret_trims_real_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PADAYON_TEST_SECRET", "  s3cret-value ")
    assert require_secret("PADAYON_TEST_SECRET") == "s3cret-value"


def test_require_secret_rejects_template_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PADAYON_TEST_SECRET", "change-me")
    with pytest.raises(MissingSecretError):
        require_secret("PADAYON_TEST_SECRET")


def test_redact_keeps_last_four_characters() -> None:
    assert redact("abcdef1234") == "******1234"
    assert redact("abc") == "abc"
    assert redact(None) == "<unset>"
