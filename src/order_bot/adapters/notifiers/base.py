import time
from abc import ABC
from http import HTTPStatus

import backoff
import httpx
import structlog
from prometheus_client import Counter, Histogram

from order_bot.core.domain.events.exceptions import ChannelUnavailable, DeliveryFailure

logger = structlog.get_logger()

REQ_LATENCY = Histogram("notifier_request_seconds", "Latency", ["provider","channel"])
REQ_SUCCESS = Counter  ("notifier_success_total",   "Success", ["provider","channel"])
REQ_FAILURE = Counter  ("notifier_failure_total",   "Failure", ["provider","channel"])

class BaseNotifier(ABC):
    """
    HTTP comum aos provedores: timeout limitado, métricas e tradução de erros.

    - transporte/timeout          → ChannelUnavailable
    - resposta HTTP >= 400        → DeliveryFailure
    A retentativa de WhatsApp/SMS é da fila; só o e-mail usa backoff local.
    """
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, provider: str, channel: str, timeout: float | None = None) -> None:
        self.provider = provider
        self.channel  = channel
        self.timeout  = timeout or self.DEFAULT_TIMEOUT

    def _request(self, method: str, url: str, **kw) -> httpx.Response:
        start = time.perf_counter()
        try:
            resp = httpx.request(method, url, timeout=self.timeout, **kw)
        except httpx.TransportError as exc:
            REQ_FAILURE.labels(self.provider, self.channel).inc()
            raise ChannelUnavailable(f"{self.provider}: {type(exc).__name__}: {exc}") from exc
        finally:
            REQ_LATENCY.labels(self.provider, self.channel).observe(time.perf_counter() - start)

        if resp.status_code >= HTTPStatus.BAD_REQUEST:
            REQ_FAILURE.labels(self.provider, self.channel).inc()
            logger.error(
                "notifier.http_error",
                provider=self.provider,
                status=resp.status_code,
                detail=self._detail(resp),
            )
            raise DeliveryFailure(f"{self.provider} returned HTTP {resp.status_code}")
        REQ_SUCCESS.labels(self.provider, self.channel).inc()
        return resp

    @backoff.on_exception(backoff.expo, (ChannelUnavailable, DeliveryFailure),
                          max_tries=3, jitter=None)
    def _request_with_retry(self, method: str, url: str, **kw) -> httpx.Response:
        return self._request(method, url, **kw)

    @staticmethod
    def _detail(resp: httpx.Response):
        if resp.headers.get("content-type", "").startswith("application/json"):
            try:
                return resp.json()
            except ValueError:
                return resp.text
        return resp.text[:500]
