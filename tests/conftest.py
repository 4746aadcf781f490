"""Pytest configuration and shared fixtures."""
import json
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
from scrapy.exceptions import DropItem
from scrapy.http import HtmlResponse, Request
from scrapy.settings import Settings
from scrapy.spidermiddlewares.httperror import HttpError
from twisted.python.failure import Failure

from filmography_sync.exceptions import PersistenceFailure
from filmography_sync.items import WorkItem
from filmography_sync.pipelines import CreditStorePipeline
from filmography_sync.spiders.filmography_spider import FilmographySpider


def make_document(payload: Any) -> str:
    """Wrap a payload in a profile page the way IMDb embeds it."""
    return (
        "<html><head><title>Profile</title>"
        '<script id="__NEXT_DATA__" type="application/json">'
        f"{json.dumps(payload)}"
        "</script></head><body><h1>Profile</h1></body></html>"
    )


def make_payload(released: Optional[list] = None, unreleased: Optional[list] = None) -> Dict[str, Any]:
    main_column: Dict[str, Any] = {}
    if released is not None:
        main_column["releasedPrimaryCredits"] = [{"credits": {"edges": released}}]
    if unreleased is not None:
        main_column["unreleasedPrimaryCredits"] = [{"credits": {"edges": unreleased}}]
    return {"props": {"pageProps": {"mainColumnData": main_column}}}


def make_edge(title: str, title_id: Optional[str] = None, **node: Any) -> Dict[str, Any]:
    title_node: Dict[str, Any] = {"titleText": {"text": title}}
    if title_id:
        title_node["id"] = title_id
    title_node.update(node.pop("title_fields", {}))
    return {"node": dict(node, title=title_node)}


class FakeStats:
    """Just enough of a Scrapy stats collector."""

    def __init__(self):
        self.values: Dict[str, Any] = {}

    def inc_value(self, key, count=1, start=0):
        self.values[key] = self.values.get(key, start) + count

    def set_value(self, key, value):
        self.values[key] = value

    def get_value(self, key, default=None):
        return self.values.get(key, default)


class FakeCreditStore:
    """In-memory stand-in for CreditStore with the same anti-join semantics."""

    def __init__(self, source_rows: List[WorkItem], failing_entities=()):
        self.source_rows = list(source_rows)
        self.output_rows: List[Dict[str, Any]] = []
        self.failing_entities = set(failing_entities)
        self.closed = False

    def open(self):
        return self

    def close(self):
        self.closed = True

    def pending_work_items(self) -> List[WorkItem]:
        done = {row["entity_id"] for row in self.output_rows}
        return [row for row in self.source_rows if row.entity_id not in done]

    def insert_credit(self, item) -> None:
        if item["entity_id"] in self.failing_entities:
            raise PersistenceFailure(item["entity_id"], "value too long for type character varying(255)")
        self.output_rows.append(dict(item))


def build_spider(work_items, store=None, stats=None) -> FilmographySpider:
    spider = FilmographySpider(work_items=work_items, store=store)
    spider.settings = Settings()
    spider.crawler = Mock()
    spider.crawler.spider = spider
    spider.crawler.stats = stats if stats is not None else FakeStats()
    return spider


def run_sync(store: FakeCreditStore, pages: Dict[str, Any], stats: Optional[FakeStats] = None) -> FakeStats:
    """
    Drive one sync run without a reactor.

    ``pages`` maps a profile URL to an HTML string (served as 200) or to an
    int status code (served as an error response).
    """
    stats = stats or FakeStats()
    spider = build_spider(store.pending_work_items(), store=store, stats=stats)
    pipeline = CreditStorePipeline(spider.crawler)
    pipeline.open_spider()

    for request in spider.profile_requests():
        page = pages.get(request.url, 404)
        if isinstance(page, int):
            response = HtmlResponse(url=request.url, status=page, body=b"", request=request)
            failure = Failure(HttpError(response, "Ignoring non-200 response"))
            failure.request = request
            request.errback(failure)
            continue

        response = HtmlResponse(url=request.url, body=page.encode("utf-8"), encoding="utf-8", request=request)
        for item in request.callback(response, **request.cb_kwargs):
            try:
                pipeline.process_item(item)
            except DropItem:
                pass

    pipeline.close_spider()
    return stats


@pytest.fixture
def stats() -> FakeStats:
    return FakeStats()


@pytest.fixture
def work_item() -> WorkItem:
    return WorkItem(entity_id=7, source_url="https://x/name/nm0000123/")


@pytest.fixture
def movie_a_document() -> str:
    """One released credit: Movie A (2020), playing Hero."""
    edge = make_edge(
        "Movie A",
        "tt9999",
        characters=[{"name": "Hero"}],
        title_fields={"releaseYear": {"year": 2020}, "titleType": {"text": "Movie"}},
    )
    return make_document(make_payload(released=[edge]))


@pytest.fixture
def profile_response(work_item, movie_a_document) -> HtmlResponse:
    request = Request(
        "https://www.imdb.com/name/nm0000123/",
        cb_kwargs={"work_item": work_item},
    )
    return HtmlResponse(
        url=request.url,
        body=movie_a_document.encode("utf-8"),
        encoding="utf-8",
        request=request,
    )
