"""Tests for identifier helpers."""

from __future__ import annotations

from unittest.mock import patch

from docstore_service.core.database.utils import generate_token, generate_uuid7


def test_uuid7_version_and_variant() -> None:
    value = generate_uuid7()

    assert value.version == 7
    assert value.variant == "specified in RFC 4122"


def test_uuid7_strictly_increasing_within_one_millisecond() -> None:
    with patch("docstore_service.core.database.utils.time.time", return_value=1_700_000_000.0):
        ids = [str(generate_uuid7()) for _ in range(1000)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 1000


def test_uuid7_monotonic_when_clock_steps_back() -> None:
    with patch("docstore_service.core.database.utils.time.time", return_value=1_800_000_000.0):
        later = generate_uuid7()
    with patch("docstore_service.core.database.utils.time.time", return_value=1_799_999_999.0):
        earlier_clock = generate_uuid7()

    assert str(earlier_clock) > str(later)


def test_generate_token_is_random_and_url_safe() -> None:
    tokens = {generate_token() for _ in range(100)}

    assert len(tokens) == 100
    assert all(t.replace("-", "").replace("_", "").isalnum() for t in tokens)
