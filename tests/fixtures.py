from __future__ import annotations

import threading
import time
from typing import Dict, Iterable, List, Optional

import requests

from collabnet.dblp import person_url
from collabnet.engine import Collector


def publication(*pids: str, kind: str = "article", key: str = "journals/test/0") -> str:
    """
    Build one DBLP <r> entry listing the given author pids.
    """
    authors = "".join(f'<author pid="{pid}">Author {pid}</author>' for pid in pids)
    return (
        f'<r><{kind} key="{key}" mdate="2024-01-01">{authors}'
        f'<title>Paper {key}.</title><year>2024</year></{kind}></r>'
    )


def person_xml(pid: str, name: str, *publications: str) -> str:
    """
    Build a DBLP person record. The <person> block lists the author's own pid,
    as real records do.
    """
    return (
        '<?xml version="1.0" encoding="US-ASCII"?>'
        f'<dblpperson name="{name}" pid="{pid}" n="{len(publications)}">'
        f'<person key="homepages/{pid}" mdate="2024-01-01"><author pid="{pid}">{name}</author></person>'
        + "".join(publications)
        + "</dblpperson>"
    )


def site(documents: Dict[str, str]) -> Dict[str, str]:
    """
    Map pids to their profile URLs.
    """
    return {person_url(pid): body for pid, body in documents.items()}


class FakeTransport:
    """
    In-memory replacement for the HTTP transport. Unknown URLs answer like a
    404, URLs listed in failures raise the given exception.
    """

    def __init__(self, documents: Dict[str, str], failures: Optional[Dict[str, Exception]] = None,
                 latency: float = 0.0):
        self.documents = dict(documents)
        self.failures = dict(failures or {})
        self.latency = latency
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.latency:
                time.sleep(self.latency)
            if url in self.failures:
                raise self.failures[url]
            if url not in self.documents:
                raise requests.exceptions.HTTPError(f"404 Client Error: Not Found for url: {url}")
            return self.documents[url]
        finally:
            with self._lock:
                self.active -= 1

    def count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)


def make_collector(transport: FakeTransport, **kwargs) -> Collector:
    """
    Collector wired to a fake transport with politeness delays disabled.
    """
    kwargs.setdefault("delay", 0.0)
    kwargs.setdefault("random_delay", 0.0)
    return Collector(fetch=transport, **kwargs)


def follow_collaborators(collector: Collector, selector: str = "//dblpperson/r/*/author/@pid") -> None:
    """
    Register a bare discovery callback that queues every co-author profile.
    """
    collector.on_xml(selector, lambda e: e.request.visit(person_url(e.text)))


def chain(length: int) -> Dict[str, str]:
    """
    Profiles c0 -> c1 -> ... where each one cites only the next.
    """
    docs = {}
    for i in range(length):
        pubs: Iterable[str] = [publication(f"c{i}", f"c{i + 1}")] if i + 1 < length else []
        docs[f"c{i}"] = person_xml(f"c{i}", f"Chain {i}", *pubs)
    return site(docs)
