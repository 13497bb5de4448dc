"""httpx client construction shared by the provider adapters.

Each ``ResilientClient`` sends requests through ``GatedTransport``. While a
fetch holds an ``admitted`` context for a provider, every HTTP attempt made in
that context, fan-out sub-requests and retries included, waits for the
provider's ``ProviderGate`` and is retried by httpx_retries on transient
failures. The optional hishel cache sits in front, so cache hits cost no token.
"""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import RetryTransport

from mediasync.config import get_storage_config
from mediasync.domain.errors import FetchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        CookieTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        RequestExtensions,
        RequestFiles,
        TimeoutTypes,
        URLTypes,
    )

    from mediasync.config import CacheConfig, ProviderSettings, ResilienceConfig
    from mediasync.config.http_resilience import ResponseHook


class ProviderGate:
    """Admission control for one provider's HTTP requests.

    Requests wait in FIFO order for a concurrency slot and then for a token.
    At most ``queue_depth`` requests may wait at once; further requests are
    rejected with ``FetchError(QUEUE_FULL)``. A request whose deadline passes
    while waiting gets ``FetchError(RATE_LIMIT_TIMEOUT)``.
    """

    def __init__(self, name: str, settings: ProviderSettings) -> None:
        self.name = name
        self.settings = settings
        self.retry = settings.retry.build(settings.max_retry_attempts)
        # Capacity ``burst`` refilled at ``rate_limit_qps`` tokens per second.
        self._limiter = AsyncLimiter(settings.burst, settings.burst / settings.rate_limit_qps)
        self._slots = asyncio.Semaphore(settings.max_concurrent)
        self._waiting = 0
        self._in_flight = 0

    @property
    def waiting(self) -> int:
        return self._waiting

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def slot(self, deadline: float | None = None) -> AsyncIterator[None]:
        """Hold a dispatch slot; ``deadline`` is an event-loop timestamp."""

        await self._acquire(deadline)
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            self._slots.release()

    async def _acquire(self, deadline: float | None) -> None:
        if self._waiting >= self.settings.queue_depth:
            raise FetchError(
                FetchError.Kind.QUEUE_FULL,
                f"{self.name}: {self._waiting} requests already queued",
                source=self.name,
            )
        self._waiting += 1
        holding_slot = False
        try:
            async with asyncio.timeout_at(deadline):
                await self._slots.acquire()
                holding_slot = True
                await self._limiter.acquire()
        except TimeoutError as exc:
            if holding_slot:
                self._slots.release()
            raise FetchError(
                FetchError.Kind.RATE_LIMIT_TIMEOUT,
                f"{self.name}: request could not be dispatched before its deadline",
                source=self.name,
            ) from exc
        except BaseException:
            if holding_slot:
                self._slots.release()
            raise
        finally:
            self._waiting -= 1


@dataclass(slots=True, frozen=True)
class Admission:
    gate: ProviderGate
    deadline: float | None = None


_admission: ContextVar[Admission | None] = ContextVar("provider_admission", default=None)


@contextmanager
def admitted(gate: ProviderGate, deadline: float | None = None) -> Iterator[Admission]:
    """Route HTTP requests made in this context, and tasks it spawns, through ``gate``."""

    admission = Admission(gate, deadline)
    token = _admission.set(admission)
    try:
        yield admission
    finally:
        _admission.reset(token)


def current_admission() -> Admission | None:
    return _admission.get()


class GatedTransport(httpx.AsyncBaseTransport):
    """Retries each request with the admitted gate's policy, gating every attempt.

    Without an admission the request is sent once, ungated.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        response_hooks: tuple[ResponseHook, ...] = (),
    ) -> None:
        self._attempt = _GatedAttempt(transport or httpx.AsyncHTTPTransport(), response_hooks)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        admission = current_admission()
        if admission is None:
            return await self._attempt.handle_async_request(request)
        retrying = RetryTransport(transport=self._attempt, retry=admission.gate.retry)
        return await retrying.handle_async_request(request)

    async def aclose(self) -> None:
        await self._attempt.aclose()


class _GatedAttempt(httpx.AsyncBaseTransport):
    def __init__(
        self, transport: httpx.AsyncBaseTransport, response_hooks: tuple[ResponseHook, ...]
    ) -> None:
        self._transport = transport
        self._response_hooks = response_hooks

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        admission = current_admission()
        if admission is None:
            response = await self._transport.handle_async_request(request)
        else:
            async with admission.gate.slot(admission.deadline):
                response = await self._transport.handle_async_request(request)
        for hook in self._response_hooks:
            result = hook(response)
            if inspect.isawaitable(result):
                await result
        return response

    async def aclose(self) -> None:
        await self._transport.aclose()


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    files: RequestFiles | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    cookies: CookieTypes | None
    auth: AuthTypes | UseClientDefault | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config

        storage = _build_cache_storage(config.cache)
        headers = dict(config.default_headers) if config.default_headers else None

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": GatedTransport(transport, response_hooks=config.response_hooks),
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if headers is not None:
            client_kwargs["headers"] = headers

        if storage is not None:
            self._client = AsyncCacheClient(**client_kwargs, storage=storage)
        else:
            self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self._client.request(method, url, **kwargs)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)


def _build_cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None

    if config.backend not in {"sqlite", "memory"}:
        msg = f"Unsupported cache backend: {config.backend}"
        raise ValueError(msg)

    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    else:
        database_path = ":memory:"
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
