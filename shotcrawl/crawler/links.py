"""
Link extraction and the external-link policy applied to every rendered page.
"""
from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__ = (
    "HTTP_SCHEMES",
    "Origin",
    "origin_of",
    "is_http_url",
    "normalize_url",
    "extract_links",
    "filter_links",
)

HTTP_SCHEMES = ("http", "https")
_DEFAULT_PORTS = {"http": 80, "https": 443}


class Origin(NamedTuple):
    scheme: str
    host: str
    port: Optional[int]


def origin_of(url: str) -> Origin:
    """Return the (scheme, host, port) triple of *url*, default ports filled in."""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return Origin(scheme, (parsed.hostname or "").lower(), port)


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme.lower() in HTTP_SCHEMES and bool(parsed.netloc)


def normalize_url(url: str, *, strip_fragment: bool = True) -> str:
    """
    Canonical form used for de-duplication.

    Scheme and host are lowercased, a default port is dropped and an empty
    path becomes ``/``, the same way the browser and the seed parser
    serialise URLs. Path and query are kept as given so distinct resources
    never collapse. The fragment is removed when *strip_fragment* is set.
    """
    url = url.strip()
    if strip_fragment:
        url, _ = urldefrag(url)
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in HTTP_SCHEMES or not parts.hostname:
        return url
    try:
        port = parts.port
    except ValueError:
        return url

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port in (None, _DEFAULT_PORTS[scheme]) else f"{host}:{port}"
    userinfo, at, _ = parts.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract absolute HTTP(S) ``<a href>`` targets from rendered HTML.

    Relative hrefs are resolved against *base_url*; ``mailto:``,
    ``javascript:`` and other schemes are dropped. Order follows the document.
    """
    soup = BeautifulSoup(html, "html.parser")
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag) and isinstance(base_tag.get("href"), str):
        base_url = urljoin(base_url, base_tag["href"].strip())

    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith(("mailto:", "javascript:", "tel:", "data:")):
            continue
        absolute = urljoin(base_url, raw)
        if is_http_url(absolute):
            links.append(absolute)
    return links


def filter_links(
    parent_url: str,
    candidates: Iterable[str],
    follow_external: bool,
    *,
    strip_fragments: bool = True,
) -> List[str]:
    """
    Apply the link policy to the links discovered on *parent_url*.

    Non-HTTP(S) URLs are rejected. When *follow_external* is false, links
    whose origin differs from the parent page's origin (not the seed's) are
    rejected too. Duplicates collapse to their first occurrence. Already
    visited URLs are left for the tracker to reject at claim time.
    """
    parent_origin = origin_of(parent_url)
    seen: set[str] = set()
    accepted: List[str] = []
    for raw in candidates:
        if not isinstance(raw, str) or not is_http_url(raw):
            continue
        url = normalize_url(raw, strip_fragment=strip_fragments)
        if not follow_external and origin_of(url) != parent_origin:
            continue
        if url in seen:
            continue
        seen.add(url)
        accepted.append(url)
    return accepted
