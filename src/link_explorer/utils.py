import logging
import re
from typing import Iterable, Optional, Pattern, Union
from urllib.parse import unquote, urljoin, urlparse, urlunparse

from . import config

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_WHITESPACE_RE = re.compile(r"\s+")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def _resolve_against_base(href: str, base_url: str) -> Optional[str]:
    """Resolve a scheme-less href the way a browser resolves it against a page URL."""
    base = urlparse(base_url)
    if not base.scheme or not base.netloc:
        return None

    if href.startswith("//"):
        return f"{base.scheme}:{href}"

    origin = f"{base.scheme}://{base.netloc}"
    if href.startswith("/"):
        return urljoin(origin, href)

    # Bare relative path: resolve against the directory of the base path
    directory = base.path[: base.path.rfind("/") + 1] or "/"
    return urljoin(origin + directory, href)


def normalize_url(url: str, base_url: Optional[str] = None) -> Optional[str]:
    """Return the canonical absolute form of ``url``, or None if it is not a usable http(s) URL.

    Relative and protocol-relative hrefs are resolved against ``base_url`` when one is given.
    The fragment is dropped, scheme and host are lower-cased, default ports are removed
    and an empty path becomes ``/``. Never raises.

    Examples:
        >>> normalize_url("/docs/a#intro", "https://Example.com/docs/")
        'https://example.com/docs/a'
        >>> normalize_url("mailto:someone@example.com") is None
        True
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    try:
        if base_url and not _SCHEME_RE.match(url):
            url = _resolve_against_base(url, base_url)
            if url is None:
                return None

        parsed = urlparse(url)
        scheme = parsed.scheme.lower()
        if scheme not in ("http", "https"):
            return None

        hostname = parsed.hostname
        if not hostname:
            return None

        netloc = f"[{hostname}]" if ":" in hostname else hostname
        port = parsed.port
        if port is not None and port != _DEFAULT_PORTS[scheme]:
            netloc = f"{netloc}:{port}"
        if parsed.username:
            userinfo = parsed.username
            if parsed.password:
                userinfo = f"{userinfo}:{parsed.password}"
            netloc = f"{userinfo}@{netloc}"

        path = parsed.path or "/"
        if "/." in path:
            # Collapse "." and ".." segments
            path = urlparse(urljoin(f"{scheme}://{netloc}", path)).path or "/"

        return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ""))
    except ValueError as e:
        logger.debug(f"Could not normalize URL {url!r}: {e}")
        return None


def get_domain(url: str) -> Optional[str]:
    """Return the hostname of ``url`` or None when it has none."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def should_exclude_url(href: str, patterns: Optional[Iterable[Union[str, Pattern]]] = None) -> bool:
    """Check a raw href against the exclusion patterns."""
    if patterns is None:
        patterns = config.EXCLUDE_LINK_PATTERNS
    return any(re.search(pattern, href) for pattern in patterns)


def clean_link_text(raw_text: Optional[str], url: str, max_length: int = config.MAX_LINK_TEXT_LENGTH) -> str:
    """Build a display label for a link.

    Whitespace is collapsed and the text cut to ``max_length``. Anchors without text
    are labelled with the last path segment of the URL, or its hostname.
    """
    text = _WHITESPACE_RE.sub(" ", (raw_text or "").strip())[:max_length]
    if text:
        return text

    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    segments = [segment for segment in parsed.path.split("/") if segment]
    if segments:
        return unquote(segments[-1])
    return parsed.hostname or url


def truncate_url(url: str, max_length: int = 60) -> str:
    """Shorten a URL for display, keeping the origin intact where possible."""
    if len(url) <= max_length:
        return url

    try:
        parsed = urlparse(url)
    except ValueError:
        return url[:max_length] + "..."

    path = parsed.path + (f"?{parsed.query}" if parsed.query else "")
    if parsed.scheme and parsed.netloc and len(path) > max_length - 20:
        return f"{parsed.scheme}://{parsed.netloc}" + path[: max_length - 20] + "..."
    return url[:max_length] + "..."
