"""
Address field table -- the explicit set of fields compared at confirmation.

Each entry is a ``(field_name, extractor)`` pair applied to both the address
the shop will deliver to and the address approved by the processor.  The
table is ordered so that mismatch reports are stable.

Comparison rules:
    - A field the processor did not return (None) is not checked.
    - A field the processor did return must equal the shop's value.  A
      missing shop value compares as the empty string.
    - Values are compared as exact strings; no case folding or trimming.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from operator import attrgetter

from checkout_kernel.domain.values import PostalAddress

AddressField = tuple[str, Callable[[PostalAddress], str | None]]

ADDRESS_FIELDS: tuple[AddressField, ...] = (
    ("street", attrgetter("street")),
    ("street_number", attrgetter("street_number")),
    ("city", attrgetter("city")),
    ("postal_code", attrgetter("postal_code")),
    ("country", attrgetter("country")),
    ("company", attrgetter("company")),
    ("additional_info", attrgetter("additional_info")),
)

# Fields a configuration may add on top of the default table.
OPTIONAL_ADDRESS_FIELDS: tuple[AddressField, ...] = (
    ("first_name", attrgetter("first_name")),
    ("last_name", attrgetter("last_name")),
    ("state", attrgetter("state")),
)

_KNOWN_FIELDS: dict[str, AddressField] = {
    name: (name, extractor)
    for name, extractor in ADDRESS_FIELDS + OPTIONAL_ADDRESS_FIELDS
}


def fields_by_name(names: Iterable[str]) -> tuple[AddressField, ...]:
    """Build a field table from field names, preserving the given order.

    Raises:
        ValueError: if a name is not a PostalAddress field or is repeated.
    """
    table: list[AddressField] = []
    seen: set[str] = set()
    for name in names:
        if name not in _KNOWN_FIELDS:
            raise ValueError(f"Unknown address field: {name!r}")
        if name in seen:
            raise ValueError(f"Duplicate address field: {name!r}")
        seen.add(name)
        table.append(_KNOWN_FIELDS[name])
    if not table:
        raise ValueError("At least one address field must be compared")
    return tuple(table)


def _as_text(value: str | None) -> str:
    return "" if value is None else str(value)


def mismatched_fields(
    resolved: PostalAddress,
    approved: PostalAddress,
    fields: tuple[AddressField, ...] = ADDRESS_FIELDS,
) -> tuple[str, ...]:
    """Names of fields present on ``approved`` that differ on ``resolved``."""
    mismatches: list[str] = []
    for name, extractor in fields:
        approved_value = extractor(approved)
        if approved_value is None:
            continue
        if _as_text(extractor(resolved)) != _as_text(approved_value):
            mismatches.append(name)
    return tuple(mismatches)
