"""Token transport: where a request carries its token.

Resolution order:
1. `Authorization: Bearer <token>` header
2. A portal-specific cookie (`agent_token`, `operator_token`)
3. For the back-office only, a `token` query parameter (PDF/CSV exports
   opened in a new tab cannot set headers)

A bearer header with an empty token segment counts as no header.
Cookie parsing is delegated to Starlette's parser, which tolerates
whitespace around pairs and skips malformed chunks instead of failing.
"""

from typing import Mapping, Optional

from starlette.requests import cookie_parser

AGENT_COOKIE = "agent_token"
OPERATOR_COOKIE = "operator_token"

_BEARER_PREFIX = "bearer "


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an Authorization header, or None."""
    if not authorization:
        return None
    if not authorization[: len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
        return None
    token = authorization[len(_BEARER_PREFIX):].strip()
    return token or None


def extract_cookie(cookie_header: Optional[str], name: str) -> Optional[str]:
    """Return a named cookie's value from a raw Cookie header, or None."""
    if not cookie_header:
        return None
    value = cookie_parser(cookie_header).get(name)
    return value or None


def extract_token(
    headers: Mapping[str, str],
    cookie_name: Optional[str] = None,
    query_token: Optional[str] = None,
) -> Optional[str]:
    """Find a token in a request's headers, bearer first, then cookie."""
    token = extract_bearer(headers.get("authorization"))
    if token:
        return token
    if cookie_name:
        token = extract_cookie(headers.get("cookie"), cookie_name)
        if token:
            return token
    if query_token and query_token.strip():
        return query_token.strip()
    return None
