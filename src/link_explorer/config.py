import os
import re
from dotenv import load_dotenv

load_dotenv()

# Maximum links to keep per page
MAX_LINKS_PER_PAGE = int(os.getenv("LINK_EXPLORER_MAX_LINKS", "50"))

# Seconds before a single proxy request is abandoned
REQUEST_TIMEOUT = float(os.getenv("LINK_EXPLORER_REQUEST_TIMEOUT", "20"))

# Pass-through proxies, tried in order. The target URL is appended to "url".
CORS_PROXIES = [
    {"url": "https://api.allorigins.win/raw?url=", "encode": True},
    {"url": "https://corsproxy.io/?", "encode": True},
    {"url": "https://api.codetabs.com/v1/proxy?quest=", "encode": True},
]

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# A proxied body must be at least this long to count as a page
MIN_HTML_LENGTH = 100

# Main content areas, in priority order
MAIN_CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".main-content",
    ".content",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".page-content",
    "#content",
    "#main",
    ".markdown-body",  # GitHub
    ".docs-content",  # documentation sites
    ".prose",  # Tailwind prose
]

# Regions whose links are never extracted
EXCLUDE_SELECTORS = [
    # Navigation
    "nav",
    "header",
    "footer",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    ".nav",
    ".navbar",
    ".navigation",
    ".menu",
    ".sidebar",
    ".side-nav",
    ".sidenav",
    # Table of contents
    ".toc",
    ".table-of-contents",
    ".tableOfContents",
    "#toc",
    "#table-of-contents",
    '[class*="toc"]',
    ".on-this-page",
    ".page-toc",
    # Breadcrumbs
    ".breadcrumb",
    ".breadcrumbs",
    '[aria-label="breadcrumb"]',
    # Related content
    ".related",
    ".related-posts",
    ".suggested",
    ".recommendations",
    # Comments
    ".comments",
    "#comments",
    ".comment-section",
    # Ads and misc
    ".ad",
    ".ads",
    ".advertisement",
    ".social-share",
    ".share-buttons",
    ".author-bio",
    # Pagination
    ".pagination",
    ".pager",
]

# Raw hrefs matching any of these are skipped before normalization
EXCLUDE_LINK_PATTERNS = [
    re.compile(r"^#"),  # Anchor links
    re.compile(r"^javascript:", re.IGNORECASE),
    re.compile(r"^mailto:", re.IGNORECASE),
    re.compile(r"^tel:", re.IGNORECASE),
    re.compile(r"^data:", re.IGNORECASE),
    re.compile(r"\.(jpg|jpeg|png|gif|svg|webp|ico|pdf|zip|tar|gz|mp3|mp4|avi|mov)$", re.IGNORECASE),
    re.compile(r"^//[^/]"),  # Protocol-relative, usually CDN assets
]

# Link text longer than this is cut
MAX_LINK_TEXT_LENGTH = 200
