"""ULID generation utility for tabgrouper.

Provides ``generate_ulid()``, used for:
  - group identifiers handed out by the in-memory group backend
  - operation_id values attached to log entries for a command or bulk run

Uses the ``python-ulid`` library — do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())
