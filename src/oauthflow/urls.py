# URL builder for provider redirects.
# Created: 2026-10-18

from __future__ import annotations

import urllib.parse
from collections.abc import Mapping, Sequence

UrlParams = Mapping[str, str | int | bool]


def _encode_value(value: str | int | bool) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(url: str, params: UrlParams, scope: Sequence[str] | None = None) -> str:
    """Compose *url* with *params* and an optional *scope* list.

    Query parameters already present on *url* are kept. When *scope* is
    non-empty it is sent as a single ``scope`` parameter, space separated.
    """
    parts = urllib.parse.urlsplit(url)
    query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
    query.extend((key, _encode_value(value)) for key, value in params.items())
    if scope:
        query.append(("scope", " ".join(scope)))

    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))
