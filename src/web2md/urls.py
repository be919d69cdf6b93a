"""URL validation and canonicalisation.

The canonical form is used verbatim as the cache key input and as the
``url`` field of every document, so two spellings of the same address
must canonicalise identically.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from web2md.errors import ErrorCode, Web2MdError

MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = frozenset({"http", "https"})


def _invalid(raw: str, reason: str) -> Web2MdError:
    return Web2MdError(
        code=ErrorCode.INVALID_URL,
        message=f"Invalid URL {raw!r}: {reason}",
        suggestion="Provide an absolute http:// or https:// URL (max 2048 chars).",
        recoverable=False,
    )


def validate_url(raw: str) -> str:
    """Return the canonical absolute form of *raw* or raise INVALID_URL.

    Scheme and host are lowercased, an empty path becomes ``/`` and the
    fragment is dropped. Port, path and query are kept as given.
    """
    candidate = raw.strip()
    if not candidate:
        raise _invalid(raw, "URL is empty")
    if len(candidate) > MAX_URL_LENGTH:
        raise _invalid(raw, f"URL exceeds {MAX_URL_LENGTH} characters")

    try:
        parts = urlsplit(candidate)
        port = parts.port  # Raises ValueError on a non-numeric or out-of-range port
    except ValueError as exc:
        raise _invalid(raw, str(exc)) from exc

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise _invalid(raw, f"scheme {parts.scheme or '(none)'!r} is not http or https")

    hostname = parts.hostname
    if not hostname:
        raise _invalid(raw, "URL has no host")

    host = f"[{hostname}]" if ":" in hostname else hostname
    netloc = host if port is None else f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))
