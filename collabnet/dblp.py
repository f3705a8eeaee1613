from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from .config import DBLP_HOST, DBLP_PERSON_BASE

# hosts serving the same person records under /pid/
DBLP_HOSTS = frozenset({DBLP_HOST, "dblp.org", "www.dblp.org", "dblp.dagstuhl.de"})


def dblp_extract_pid(val: Optional[str]) -> Optional[str]:
    """
    Extract a DBLP person identifier from a hint value, handling plain IDs,
    prefixed forms, and full URLs that contain a /pid/ segment. A trailing
    record extension such as ".xml" is dropped.
    """
    if not val:
        return None
    s = str(val).strip()
    if not s:
        return None
    m = re.search(r"/pid/([^#?]+?)(?:\.(?:xml|html|bib|rdf|nt|ttl))?(?:[#?].*)?$", s)
    if m:
        return m.group(1).strip("/") or None
    m = re.match(r"^(pid:)?([0-9a-zA-Z/._-]+)$", s)
    if m:
        return m.group(2)
    return None


def person_url(pid: str, base_url: str = DBLP_PERSON_BASE) -> str:
    """
    Build the XML profile URL for a DBLP person identifier. The identifier is
    inserted as-is; escaping is left to the transport.
    """
    return f"{base_url.rstrip('/')}/{pid}.xml"


def seed_url(hint: str, base_url: str = DBLP_PERSON_BASE) -> str:
    """
    Turn a command-line seed into a profile URL. DBLP profile URLs in any
    form (http or https, mirror host, .html page, query or fragment) are
    rebuilt from their pid so they match the URLs found while crawling.
    Other http(s) URLs are kept unchanged, anything else is treated as a pid.
    """
    s = (hint or "").strip()
    if re.match(r"^https?://", s, flags=re.IGNORECASE):
        host = (urlparse(s).hostname or "").lower()
        pid = dblp_extract_pid(s)
        if pid and host in DBLP_HOSTS | {urlparse(base_url).hostname or ""}:
            return person_url(pid, base_url)
        return s
    pid = dblp_extract_pid(s)
    if not pid:
        raise ValueError(f"Not a DBLP person identifier or URL: {hint!r}")
    return person_url(pid, base_url)
