from __future__ import annotations

import json

import httpx
import pytest

from harvester.utils.http import FetchResult, RateLimitedTransport
from harvester.utils.rate_limiter import RateLimiter

BASE_URL = "https://www.indiacode.nic.in"


class FakeClock:
    """Monotonic clock whose sleep() advances time instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakePortal:
    """httpx MockTransport handler serving canned responses per URL.

    Each registered URL holds a queue of (status, body) responses; the last
    one is repeated once the queue is drained. Unknown URLs return 404.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.routes: dict[str, list[tuple[int, str]]] = {}
        self.requests: list[tuple[str, float]] = []
        self.headers: list[httpx.Headers] = []

    def add(self, url: str, *responses) -> None:
        queue = []
        for response in responses:
            if isinstance(response, tuple):
                queue.append(response)
            else:
                queue.append((200, response))
        self.routes[str(httpx.URL(url))] = queue

    def add_json(self, url: str, payload: dict) -> None:
        self.add(url, (200, json.dumps(payload)))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append((url, self.clock.now))
        self.headers.append(request.headers)
        queue = self.routes.get(url)
        if not queue:
            return httpx.Response(404, text="")
        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        content_type = "application/json" if body.startswith("{") else "text/html"
        return httpx.Response(status, text=body, headers={"content-type": content_type})

    def urls(self) -> list[str]:
        return [url for url, _ in self.requests]

    def transport(self, max_retries: int = 3, min_interval: float = 0.5) -> RateLimitedTransport:
        return RateLimitedTransport(
            max_retries=max_retries,
            rate_limiter=RateLimiter(min_interval, clock=self.clock.monotonic, sleep=self.clock.sleep),
            client=httpx.Client(transport=httpx.MockTransport(self.handler)),
            sleep=self.clock.sleep,
        )


class StubTransport:
    """Minimal transport double: maps URLs to FetchResults, records calls."""

    def __init__(self, responses: dict[str, FetchResult] | None = None, default: FetchResult | None = None):
        self.responses = responses or {}
        self.default = default or FetchResult(status=404, body="")
        self.calls: list[str] = []

    def request(self, url: str) -> FetchResult:
        self.calls.append(url)
        response = self.responses.get(url, self.default)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def portal(clock):
    return FakePortal(clock)


def table_row(date: str, number: str, title: str, href: str) -> str:
    return (
        "<tr>"
        f'<td headers="t1">{date}</td>'
        f'<td headers="t2">{number}</td>'
        f'<td headers="t3">{title}</td>'
        f'<td headers="t4"><a href="{href}">View...</a></td>'
        "</tr>"
    )


def listing_page(rows: list[str], next_offset: int | None = None, total: int = 0) -> str:
    next_link = ""
    if next_offset is not None:
        next_link = f'<a href="/handle/123456789/1362/browse?offset={next_offset}"><img src="/image/nextPage.gif"></a>'
    return (
        "<html><body>"
        f'<div class="panel-heading1">Showing items 1 to {len(rows)} of {total}</div>'
        '<table class="table table-bordered">'
        "<tr><th>Enactment Date</th><th>Act Number</th><th>Short Title</th><th>View</th></tr>"
        + "".join(rows)
        + "</table>"
        + next_link
        + "</body></html>"
    )


def act_page(sections: list[tuple[str, str, str]], act_id: str = "AC_CEN_5_23_00001_185513_1517807318487",
             metadata: dict[str, str] | None = None) -> str:
    """Act detail page in the accordion skin. ``sections`` holds (section_id, label, title)."""
    meta_rows = "".join(
        f'<tr><td class="metadataFieldLabel">{label}:</td><td class="metadataFieldValue">{value}</td></tr>'
        for label, value in (metadata or {}).items()
    )
    anchors = "".join(
        f'<a class="title" id="{act_id}#{sid}#{act_id}" href="#">'
        f'<span class="label-info">{label}</span> {title}</a>'
        for sid, label, title in sections
    )
    return (
        "<html><body>"
        f'<table class="itemDisplayTable">{meta_rows}</table>'
        f'<div class="hideshowsection">{anchors}</div>'
        "</body></html>"
    )


@pytest.fixture
def make_listing_page():
    return listing_page


@pytest.fixture
def make_table_row():
    return table_row


@pytest.fixture
def make_act_page():
    return act_page
