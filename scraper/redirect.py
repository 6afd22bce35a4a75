"""
Redirect Resolver — turn DuckDuckGo tracking links into real destinations.

    /l/?uddg=https%3A%2F%2Fexample.com&rut=...   -> https://example.com
    //duckduckgo.com/l/?uddg=...                 -> decoded uddg value
    https://example.com/page                     -> unchanged
    /l/?rut=...                                  -> https://duckduckgo.com/l/?rut=...
    /relative/path                               -> "" (unusable)

Pure string handling, never touches the network.
"""

from __future__ import annotations

from urllib.parse import unquote_plus, urljoin, urlsplit

REDIRECT_PATH = "/l/"
REDIRECT_PARAM = "uddg"
ENGINE_DOMAIN = "duckduckgo.com"
ENGINE_BASE_URL = "https://duckduckgo.com"


def resolve_redirect(raw_link: str) -> str:
    """Return the absolute destination URL, or "" if the link is unusable."""
    if not raw_link:
        return ""
    link = raw_link.strip()

    if _is_redirect(link):
        return _decode_target(link)

    if link.startswith("http"):
        return link

    return ""


def _is_redirect(link: str) -> bool:
    try:
        parts = urlsplit(link)
    except ValueError:
        return False
    if not parts.path.startswith(REDIRECT_PATH):
        return False
    host = (parts.hostname or "").lower()
    return host == "" or host == ENGINE_DOMAIN or host.endswith("." + ENGINE_DOMAIN)


def _decode_target(link: str) -> str:
    """Pull ``uddg`` out of the query string and percent-decode it once."""
    query = urlsplit(link).query
    raw_value = ""
    for pair in query.split("&"):
        key, _, value = pair.partition("=")
        if key == REDIRECT_PARAM:
            raw_value = value
            break

    if not raw_value:
        # No destination to decode: keep the tracking link itself, made absolute.
        return urljoin(ENGINE_BASE_URL, link)

    try:
        return unquote_plus(raw_value, errors="strict")
    except UnicodeDecodeError:
        # Undecodable bytes: keep the still-encoded value.
        return raw_value
