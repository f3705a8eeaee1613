from __future__ import annotations

from typing import Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import DECODE_ERRORS
from .config import (
    HTTP_TIMEOUT_DEFAULT,
    HTTP_BACKOFF_INITIAL,
    HTTP_MAX_RETRIES,
    HTTP_RETRY_STATUS_CODES,
)

# DBLP serves person records as XML; identify the client politely
DEFAULT_XML_HEADERS = {
    "User-Agent": "Mozilla/5.0 (collabnet co-authorship crawler)",
    "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
}

# Global session for connection pooling, shared by all fetch workers
_SESSION = requests.Session()

# Configure retries
_RETRY_STRATEGY = Retry(
    total=HTTP_MAX_RETRIES,
    backoff_factor=HTTP_BACKOFF_INITIAL,
    status_forcelist=HTTP_RETRY_STATUS_CODES,
    allowed_methods=["GET"],
    respect_retry_after_header=True,
)
_ADAPTER = HTTPAdapter(max_retries=_RETRY_STRATEGY)
_SESSION.mount("https://", _ADAPTER)
_SESSION.mount("http://", _ADAPTER)


def http_fetch_bytes(url: str, headers: Dict[str, str], timeout: float) -> bytes:
    """
    Perform an HTTP GET through the pooled session, letting the mounted retry
    policy handle transient failures, and return the body as raw bytes.

    Non-2xx responses raise requests.exceptions.HTTPError.
    """
    resp = _SESSION.get(url, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.content


def decode_body(raw: bytes) -> str:
    """
    Turn a response body into text by inspecting byte order marks, trying
    UTF-8 first, and falling back to Latin-1 when needed.
    """
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig")
    if raw.startswith(b"\xff\xfe"):
        try:
            return raw[2:].decode("utf-16le")
        except DECODE_ERRORS:
            pass
    if raw.startswith(b"\xfe\xff"):
        try:
            return raw[2:].decode("utf-16be")
        except DECODE_ERRORS:
            pass
    # no BOM - try UTF-8, fall back to Latin-1
    try:
        return raw.decode("utf-8")
    except DECODE_ERRORS:
        return raw.decode("latin-1", errors="replace")


def http_get_text(url: str, timeout: float = HTTP_TIMEOUT_DEFAULT) -> str:
    """
    Download an XML or text document and return it decoded. This is the
    default transport used by the collector.
    """
    headers = DEFAULT_XML_HEADERS.copy()
    raw = http_fetch_bytes(url, headers, timeout)
    return decode_body(raw)
