from __future__ import annotations

import threading
from typing import List, Optional, Tuple

from .config import (
    DBLP_PERSON_BASE,
    NAME_SELECTOR,
    PID_SELECTOR,
    COLLABORATOR_SELECTOR,
)
from .dblp import person_url, seed_url
from .engine import Collector, Request, XMLElement
from .log_utils import logger, LogSource, LogCategory
from .models import AuthorPage, AuthorRecord

# key of the per-request AuthorPage inside Request.ctx
PAGE_KEY = "author_page"


class CoauthorCrawler:
    """
    Build a co-authorship dataset from DBLP person records.

    Every fetched profile gets its own AuthorPage in the request context. Name
    and pid come from the root element, each co-author pid found on the
    publication list is recorded and its profile queued one hop deeper. When
    the collector finishes a page, the page is finalized and appended to the
    output list; that append is the only state shared between workers.
    """

    def __init__(self, collector: Optional[Collector] = None, base_url: str = DBLP_PERSON_BASE):
        self.collector = collector or Collector()
        self.base_url = base_url

        self._lock = threading.Lock()
        self._records: List[AuthorRecord] = []
        self._failures: List[Tuple[str, BaseException]] = []

        self.collector.on_request(self._on_request)
        self.collector.on_xml(NAME_SELECTOR, self._on_name)
        self.collector.on_xml(PID_SELECTOR, self._on_pid)
        self.collector.on_xml(COLLABORATOR_SELECTOR, self._on_collaborator)
        self.collector.on_scraped(self._on_scraped)
        self.collector.on_error(self._on_error)

    @property
    def records(self) -> List[AuthorRecord]:
        """
        Finished records in completion order.
        """
        with self._lock:
            return list(self._records)

    @property
    def failures(self) -> List[Tuple[str, BaseException]]:
        with self._lock:
            return list(self._failures)

    def seed_urls(self, *seeds: str) -> List[str]:
        """
        Resolve seeds (profile URLs or bare pids) to profile URLs without
        fetching anything. Raises ValueError for a missing or invalid seed.
        """
        if not seeds:
            raise ValueError("At least one seed is required")
        return [seed_url(s, self.base_url) for s in seeds]

    def crawl(self, *seeds: str) -> List[AuthorRecord]:
        """
        Crawl from one or more seeds (profile URLs or bare pids) and block
        until every reachable page within the depth bound is done.
        """
        urls = self.seed_urls(*seeds)

        logger.step(
            f"Crawl started: {len(urls)} seed(s), max depth {self.collector.max_depth}, "
            f"parallelism {self.collector.parallelism}",
            category=LogCategory.PLAN,
            source=LogSource.SYSTEM,
        )
        for url in urls:
            if not self.collector.visit(url):
                logger.warn(f"Seed rejected by crawl policy: {url}", category=LogCategory.SKIP)
        self.collector.wait()

        records = self.records
        logger.step(
            f"Crawl complete: {len(records)} author(s), {len(self.failures)} failed page(s)",
            category=LogCategory.PLAN,
            source=LogSource.SYSTEM,
        )
        return records

    @staticmethod
    def _page(request: Request) -> AuthorPage:
        return request.ctx.setdefault(PAGE_KEY, AuthorPage())

    def _on_request(self, request: Request) -> None:
        request.ctx[PAGE_KEY] = AuthorPage()
        logger.info(f"Visiting {request.url}", category=LogCategory.VISIT, source=LogSource.DBLP)

    def _on_name(self, e: XMLElement) -> None:
        self._page(e.request).name = e.text

    def _on_pid(self, e: XMLElement) -> None:
        self._page(e.request).pid = e.text

    def _on_collaborator(self, e: XMLElement) -> None:
        # a co-author listed on several publications is only followed once per page
        if self._page(e.request).add_collaborator(e.text):
            e.request.visit(person_url(e.text, self.base_url))

    def _on_scraped(self, request: Request) -> None:
        record = self._page(request).finalize()
        if not record.pid:
            logger.warn(f"No pid found on {request.url}", category=LogCategory.SCRAPE, source=LogSource.DBLP)
        with self._lock:
            self._records.append(record)
        logger.success(
            f"Finished {request.url}: {record.name or '?'} ({len(record.collaborators)} collaborator(s))",
            category=LogCategory.SCRAPE,
            source=LogSource.DBLP,
        )

    def _on_error(self, request: Request, error: BaseException) -> None:
        logger.warn(f"Request URL: {request.url} failed: {error}", category=LogCategory.ERROR, source=LogSource.DBLP)
        with self._lock:
            self._failures.append((request.url, error))
