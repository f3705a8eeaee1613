from __future__ import annotations

import random
import threading
import time
import xml.etree.ElementTree as ElementTree
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from .config import (
    DBLP_HOST,
    MAX_DEPTH,
    PARALLELISM,
    REQUEST_DELAY,
    RANDOM_DELAY,
    ALLOW_URL_REVISIT,
)
from .exceptions import PAGE_ERRORS
from .http_utils import http_get_text
from .log_utils import logger, LogSource, LogCategory
from .xml_select import Selector, compile_selector

# given a URL, return the document body
Fetcher = Callable[[str], str]


class Request:
    """
    One queued fetch. The ctx dict is private to this request: values stored
    there while one page is processed are never visible to any other page,
    including pages discovered from it.
    """

    def __init__(self, url: str, depth: int, collector: "Collector"):
        self.url = url
        self.depth = depth
        self.ctx: Dict[str, Any] = {}
        self._collector = collector

    def absolute_url(self, link: str) -> str:
        return urljoin(self.url, link)

    def visit(self, link: str) -> bool:
        """
        Queue a page discovered on this one, one hop deeper.
        """
        return self._collector._enqueue(self.absolute_url(link), self.depth + 1)

    def __repr__(self) -> str:
        return f"Request(url={self.url!r}, depth={self.depth})"


class XMLElement:
    """
    A selector match handed to on_xml callbacks.
    """
    __slots__ = ("text", "request", "node", "selector")

    def __init__(self, text: str, request: Request, node: ElementTree.Element, selector: str):
        self.text = text
        self.request = request
        self.node = node
        self.selector = selector


class Collector:
    """
    Bounded-depth crawler over XML documents.

    Fetches run on a fixed pool of `parallelism` worker threads. Before each
    fetch a worker waits `delay` plus a random share of `random_delay`
    seconds, which holds only that worker. Pages linked from a page at depth
    d are depth d + 1; anything deeper than `max_depth` or outside the
    allowed domains is dropped at visit time.

    Per page, callbacks fire in this order: on_request, on_xml matches in
    document order, on_scraped. A page whose fetch or parse fails goes to the
    on_error callbacks instead and never reaches on_scraped.
    """

    def __init__(
            self,
            allowed_domains: Iterable[str] = (DBLP_HOST,),
            max_depth: int = MAX_DEPTH,
            parallelism: int = PARALLELISM,
            delay: float = REQUEST_DELAY,
            random_delay: float = RANDOM_DELAY,
            allow_revisit: bool = ALLOW_URL_REVISIT,
            fetch: Optional[Fetcher] = None,
            sleep: Callable[[float], None] = time.sleep,
            rng: Optional[random.Random] = None,
    ):
        self.allowed_domains = frozenset(d.strip().lower() for d in allowed_domains if d and d.strip())
        self.allow_revisit = allow_revisit
        self._fetch = fetch or http_get_text
        self._sleep = sleep
        self._rng = rng or random.Random()

        self._xml_callbacks: List[Tuple[Selector, Callable[[XMLElement], None]]] = []
        self._request_callbacks: List[Callable[[Request], None]] = []
        self._scraped_callbacks: List[Callable[[Request], None]] = []
        self._error_callbacks: List[Callable[[Request, BaseException], None]] = []

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0
        self._visited: set = set()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._started = False
        self.stats = {"queued": 0, "skipped": 0, "scraped": 0, "failed": 0}

        self.max_depth = MAX_DEPTH
        self.parallelism = PARALLELISM
        self.delay = REQUEST_DELAY
        self.random_delay = RANDOM_DELAY
        self.configure(max_depth=max_depth, parallelism=parallelism, delay=delay, random_delay=random_delay)

    def configure(
            self,
            max_depth: Optional[int] = None,
            parallelism: Optional[int] = None,
            random_delay: Optional[float] = None,
            delay: Optional[float] = None,
    ) -> None:
        """
        Set traversal bounds. Only allowed before the first visit, the values
        stay fixed for the rest of the run.
        """
        if self._started:
            raise RuntimeError("Collector already started; configure before the first visit")
        if max_depth is not None:
            if max_depth < 0:
                raise ValueError(f"max_depth must be >= 0, got {max_depth}")
            self.max_depth = int(max_depth)
        if parallelism is not None:
            if parallelism < 1:
                raise ValueError(f"parallelism must be >= 1, got {parallelism}")
            self.parallelism = int(parallelism)
        if random_delay is not None:
            if random_delay < 0:
                raise ValueError(f"random_delay must be >= 0, got {random_delay}")
            self.random_delay = float(random_delay)
        if delay is not None:
            if delay < 0:
                raise ValueError(f"delay must be >= 0, got {delay}")
            self.delay = float(delay)

    # ---------------- callback registration ----------------

    def on_xml(self, selector: str, callback: Callable[[XMLElement], None]) -> None:
        self._xml_callbacks.append((compile_selector(selector), callback))

    def on_request(self, callback: Callable[[Request], None]) -> None:
        self._request_callbacks.append(callback)

    def on_scraped(self, callback: Callable[[Request], None]) -> None:
        self._scraped_callbacks.append(callback)

    def on_error(self, callback: Callable[[Request, BaseException], None]) -> None:
        self._error_callbacks.append(callback)

    # ---------------- scheduling ----------------

    def visit(self, url: str) -> bool:
        """
        Queue a seed page at depth 0. Returns False when the URL was dropped
        by the domain, depth, or revisit policy.
        """
        return self._enqueue(url, 0)

    def wait(self) -> None:
        """
        Block until every queued page, including pages discovered while
        waiting, has been scraped or has failed. Must not be called from a
        callback.
        """
        with self._idle:
            while self._pending:
                self._idle.wait()
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def run(self, *urls: str) -> None:
        for url in urls:
            self.visit(url)
        self.wait()

    def _policy_violation(self, url: str, depth: int) -> Optional[str]:
        host = (urlparse(url).hostname or "").lower()
        if self.allowed_domains and host not in self.allowed_domains:
            return f"domain {host or '?'} not allowed"
        if depth > self.max_depth:
            return f"depth {depth} exceeds max depth {self.max_depth}"
        return None

    def _enqueue(self, url: str, depth: int) -> bool:
        reason = self._policy_violation(url, depth)
        with self._idle:
            if reason is None and not self.allow_revisit:
                if url in self._visited:
                    reason = "already visited"
                else:
                    self._visited.add(url)
            if reason is not None:
                self.stats["skipped"] += 1
            else:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=self.parallelism, thread_name_prefix="collabnet-fetch"
                    )
                self._started = True
                # the worker's decrement needs this lock, so counting after submit is safe
                self._executor.submit(self._process, Request(url, depth, self))
                self._pending += 1
                self.stats["queued"] += 1

        if reason is not None:
            logger.debug(f"Skipped {url}: {reason}", category=LogCategory.SKIP, source=LogSource.ENGINE)
            return False
        return True

    # ---------------- page processing ----------------

    def _politeness_wait(self) -> None:
        wait = self.delay
        if self.random_delay > 0:
            wait += self._rng.uniform(0, self.random_delay)
        if wait > 0:
            self._sleep(wait)

    def _process(self, request: Request) -> None:
        try:
            self._politeness_wait()
            for callback in self._request_callbacks:
                callback(request)
            body = self._fetch(request.url)
            root = ElementTree.fromstring(body)
            self._dispatch_xml(request, root)
            for callback in self._scraped_callbacks:
                callback(request)
            with self._lock:
                self.stats["scraped"] += 1
        except PAGE_ERRORS as e:
            self._handle_error(request, e)
        except Exception as e:
            # worker boundary: the page fails, the crawl goes on
            logger.error(f"Unexpected failure on {request.url}: {e}", category=LogCategory.ERROR,
                         source=LogSource.ENGINE, exc_info=True)
            self._handle_error(request, e)
        finally:
            with self._idle:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.notify_all()

    def _dispatch_xml(self, request: Request, root: ElementTree.Element) -> None:
        """
        Run on_xml callbacks for every match, ordered by the matched element's
        position in the document; matches on the same element keep
        registration order.
        """
        if not self._xml_callbacks:
            return
        position = {id(node): idx for idx, node in enumerate(root.iter())}
        matches = []
        for order, (selector, callback) in enumerate(self._xml_callbacks):
            for node, text in selector.select(root):
                matches.append((position[id(node)], order, node, text, selector.expression, callback))
        matches.sort(key=lambda m: (m[0], m[1]))
        for _, _, node, text, expression, callback in matches:
            callback(XMLElement(text, request, node, expression))

    def _handle_error(self, request: Request, error: BaseException) -> None:
        with self._lock:
            self.stats["failed"] += 1
        for callback in self._error_callbacks:
            try:
                callback(request, error)
            except Exception as cb_err:
                logger.error(f"Error callback failed for {request.url}: {cb_err}",
                             category=LogCategory.ERROR, source=LogSource.ENGINE, exc_info=True)
