"""Tests for shared ULID conversion and ordering semantics."""

from __future__ import annotations

import time

import pytest

from packages.serverhub_shared.ids import (
    ULID_STR_LENGTH,
    is_ulid,
    new_ulid,
    new_ulid_bytes,
    ulid_from_bytes,
    ulid_timestamp_ms,
    ulid_to_bytes,
)


def test_ulid_string_bytes_conversion_is_lossless() -> None:
    value = new_ulid()

    assert len(value) == ULID_STR_LENGTH
    assert ulid_from_bytes(ulid_to_bytes(value)) == value


def test_ulids_sort_in_creation_order_within_one_millisecond() -> None:
    values = [
        ulid_from_bytes(new_ulid_bytes(timestamp_ms=1_700_000_000_000))
        for _ in range(300)
    ]

    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_string_order_matches_binary_order() -> None:
    values = [new_ulid_bytes(timestamp_ms=1_700_000_000_000) for _ in range(50)]

    assert sorted(values) == sorted(values, key=ulid_from_bytes)


def test_timestamp_is_recoverable() -> None:
    before = int(time.time() * 1000)

    value = new_ulid()

    assert ulid_timestamp_ms(value) >= before


@pytest.mark.parametrize("value", ["", "short", "I" * 26, "8" + "Z" * 25, 42])
def test_is_ulid_rejects_malformed_values(value: object) -> None:
    assert is_ulid(value) is False


def test_new_ulid_bytes_rejects_out_of_range_timestamp() -> None:
    with pytest.raises(ValueError):
        new_ulid_bytes(timestamp_ms=-1)
