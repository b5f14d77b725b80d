"""Unit tests for the ULID generation utility (tabgrouper/utils/ulid.py).

Group ids and operation ids are ULIDs: 26 characters, Crockford Base32,
unique even when generated in the same millisecond.
"""

from __future__ import annotations

import re
import threading

from tabgrouper.utils.ulid import generate_ulid

# Crockford Base32 charset: 0-9 and A-Z, excluding I, L, O, U
ULID_CHARSET = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")


def test_generate_ulid_format() -> None:
    result = generate_ulid()
    assert isinstance(result, str)
    assert ULID_CHARSET.match(result), f"ULID {result!r} is not 26 Crockford Base32 chars"


def test_generate_ulid_unique() -> None:
    ulids = [generate_ulid() for _ in range(1000)]
    assert len(set(ulids)) == 1000


def test_generate_ulid_time_ordered_prefix() -> None:
    """The first 10 characters encode the timestamp and never go backwards."""
    first = generate_ulid()
    second = generate_ulid()
    assert first[:10] <= second[:10]


def test_generate_ulid_thread_safe() -> None:
    results: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        batch = [generate_ulid() for _ in range(100)]
        with lock:
            results.extend(batch)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 800
    assert len(set(results)) == 800
