"""Asynchronous request pipeline.

:class:`RequestPipeline` executes dialed requests off the UI path while sharing
its asyncio event loop. The UI calls :meth:`~RequestPipeline.dial`, which only
puts the request on an unbounded queue and returns. A worker task takes
requests off the queue and spawns one task per request, with at most
``max_concurrency`` of them talking to the network at once. Completed records
wait in an outbox until :meth:`~RequestPipeline.deliver` moves them into the
shared :class:`~openapi_tui.client.response.ResponseStore`, once per tick.

Failures never raise into the UI: transport errors and requests httpx
cannot encode become failed records.

Example::

    async with RequestPipeline(config) as pipeline:
        pipeline.dial("listPets", request)
        await pipeline.settle()
        pipeline.deliver(store)
"""

from __future__ import annotations

import asyncio
import functools
import json
import time
from collections import deque
from typing import Optional

import httpx

from openapi_tui.client.response import ResponseStore, failed_record, record_from_response
from openapi_tui.models import BuiltRequest, RequestConfig, ResponseRecord
from openapi_tui.output import get_output


class RequestPipeline:
    """Queue, worker and outbox for dialed requests.

    Args:
        config: Timeout, TLS, redirect and concurrency settings.
        dry_run: When ``True``, no network I/O happens and every request
            produces a synthetic ``200`` record describing the request.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        dry_run: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._dry_run = dry_run
        self._transport = transport
        self._requests: asyncio.Queue[tuple[str, BuiltRequest]] = asyncio.Queue()
        self._outbox: deque[tuple[str, ResponseRecord]] = deque()
        self._in_flight: dict[str, asyncio.Task[None]] = {}
        self._semaphore = asyncio.Semaphore(self._config.max_concurrency)
        self._client: Optional[httpx.AsyncClient] = None
        self._worker: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Open the HTTP client and start the worker task."""
        if self._worker is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
            transport=self._transport,
        )
        self._worker = asyncio.create_task(self._serve())

    async def aclose(self) -> None:
        """Cancel the worker and every in-flight request, then close the client."""
        tasks = list(self._in_flight.values())
        if self._worker is not None:
            tasks.append(self._worker)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.clear()
        self._worker = None
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RequestPipeline:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # UI-facing API (never blocks)
    # ------------------------------------------------------------------ #

    @property
    def in_flight(self) -> set[str]:
        """Keys whose request is still executing."""
        return set(self._in_flight)

    def dial(self, key: str, request: BuiltRequest) -> None:
        """Queue *request* for *key* and return immediately."""
        get_output().debug(f"dial {key}: {request.method} {request.url}")
        self._requests.put_nowait((key, request))

    def deliver(self, store: ResponseStore) -> list[tuple[str, ResponseRecord]]:
        """Move every completed record into *store*.

        Returns:
            The ``(key, record)`` pairs delivered, in completion order.
        """
        delivered: list[tuple[str, ResponseRecord]] = []
        while self._outbox:
            key, record = self._outbox.popleft()
            store.upsert(key, record)
            delivered.append((key, record))
        return delivered

    async def settle(self) -> None:
        """Wait until the queue is empty and nothing is in flight."""
        while True:
            await self._requests.join()
            tasks = list(self._in_flight.values())
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Worker
    # ------------------------------------------------------------------ #

    async def _serve(self) -> None:
        while True:
            key, request = await self._requests.get()
            try:
                older = self._in_flight.pop(key, None)
                if older is not None:
                    get_output().debug(f"dial {key}: superseding in-flight request")
                    older.cancel()
                task = asyncio.create_task(self._execute(key, request))
                self._in_flight[key] = task
                task.add_done_callback(functools.partial(self._forget, key))
            finally:
                self._requests.task_done()

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _execute(self, key: str, request: BuiltRequest) -> None:
        async with self._semaphore:
            record = await self.send(request)
        get_output().debug(
            f"dial {key}: {record.status if record.status is not None else record.error}"
        )
        self._outbox.append((key, record))

    async def send(self, request: BuiltRequest) -> ResponseRecord:
        """Execute *request* once and return its record. Never raises for
        transport or request-construction failures."""
        if self._dry_run:
            return _dry_run_record(request)
        assert self._client is not None, "Pipeline not started -- use as async context manager"

        started = time.monotonic()
        try:
            response = await self._client.request(
                request.method,
                request.url,
                params=request.query,
                headers=request.headers,
                content=request.body.encode("utf-8") if request.body is not None else None,
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            # ValueError covers UnicodeEncodeError from non-ASCII header values.
            elapsed = (time.monotonic() - started) * 1000
            return failed_record(f"{type(exc).__name__}: {exc}", elapsed_ms=elapsed)
        elapsed = (time.monotonic() - started) * 1000
        return record_from_response(response, elapsed_ms=elapsed)


def _dry_run_record(request: BuiltRequest) -> ResponseRecord:
    """Synthetic ``200`` describing *request* instead of sending it."""
    echo = {
        "dry_run": True,
        "method": request.method,
        "url": request.url,
        "query": [list(pair) for pair in request.query],
        "headers": [list(pair) for pair in request.headers],
        "body": request.body,
    }
    body = json.dumps(echo, indent=2, ensure_ascii=False)
    return ResponseRecord(
        status=200,
        reason="OK",
        protocol_version="HTTP/1.1",
        headers=[("content-type", "application/json")],
        body=body,
    )
