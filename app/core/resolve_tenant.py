"""Tenant Resolver — derives the board id a failure belongs to.

Invariants:
    - Sources checked in strict order, first non-empty match wins:
      query param > header > static config > host pattern > endpoint URL pattern
    - Host/URL pattern: marker "webapi" (case-insensitive) followed by exactly
      24 hex digits; anything shorter or non-hex yields nothing from that source
    - Pure function of its inputs, no IO

Design Decisions:
    - Plain mappings instead of a Request object: keeps core/ free of web framework
      types (ADR: functional core, imperative shell)
    - A repeated boardId query key resolves to its first value
    - Only the first marker occurrence is examined (Railway host naming: webapi{boardId})
"""

import re
import string
from collections.abc import Mapping

TENANT_QUERY_PARAM = "boardId"
TENANT_HEADER = "X-Board-Id"
HOST_MARKER = "webapi"
TENANT_ID_LENGTH = 24

_HEX_DIGITS = frozenset(string.hexdigits)


def extract_hex_after_marker(
    text: str | None, marker: str = HOST_MARKER,
) -> str | None:
    """Return the 24 hex chars right after the first marker occurrence, if valid."""
    if not text:
        return None
    match = re.search(re.escape(marker), text, re.IGNORECASE)
    if match is None:
        return None
    candidate = text[match.end():match.end() + TENANT_ID_LENGTH]
    if len(candidate) < TENANT_ID_LENGTH:
        return None
    if not all(c in _HEX_DIGITS for c in candidate):
        return None
    return candidate


def first_query_value(query_params: Mapping[str, str], key: str) -> str | None:
    """First value of a possibly repeated query key (multi-dicts keep all of them)."""
    getlist = getattr(query_params, "getlist", None)
    if getlist is None:
        return query_params.get(key)
    values = getlist(key)
    return values[0] if values else None


def resolve_tenant_id(
    query_params: Mapping[str, str],
    headers: Mapping[str, str],
    host: str | None,
    static_tenant_id: str | None = None,
    endpoint_url: str | None = None,
) -> str | None:
    """Resolve the tenant/board id from request data and process configuration."""
    from_query = first_query_value(query_params, TENANT_QUERY_PARAM)
    if from_query:
        return from_query

    from_header = headers.get(TENANT_HEADER)
    if from_header:
        return from_header

    if static_tenant_id:
        return static_tenant_id

    return (
        extract_hex_after_marker(host)
        or extract_hex_after_marker(endpoint_url)
    )
