"""Remote instance API.

``InstanceAPI`` is the narrow interface the core uses to create, read and
update live agents. ``LettaInstanceAPI`` talks to the Letta REST API over
httpx; ``InMemoryInstanceAPI`` backs tests and local development.

Usage:
    async with LettaInstanceAPI.from_config(settings.upstream) as api:
        agent = await api.create({"model": "openai/gpt-4o-mini", ...})
"""

import time
from abc import ABC, abstractmethod
from typing import Any
from uuid import uuid4

import httpx

from ams.config.models.upstream import UpstreamConfig
from ams.errors import ErrorKind, Failure
from ams.observability.logging import get_logger
from ams.observability.metrics import UPSTREAM_LATENCY

logger = get_logger(__name__)


class UpstreamError(Exception):
    """Raised when the remote instance API fails or times out."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: Any = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.timed_out = timed_out

    def to_failure(self) -> Failure:
        return Failure.of(
            ErrorKind.UPSTREAM_ERROR,
            self.message,
            status=self.status,
            body=self.body,
            timed_out=self.timed_out,
        )


class InstanceAPI(ABC):
    """Create, fetch and update remote agent instances."""

    @abstractmethod
    async def create(self, config: dict[str, Any]) -> dict[str, Any]:
        """Create an agent; the returned handle carries its ``id``."""
        pass

    @abstractmethod
    async def fetch(self, agent_id: str) -> dict[str, Any]:
        """Fetch an agent's current configuration."""
        pass

    @abstractmethod
    async def update(self, agent_id: str, config: dict[str, Any]) -> dict[str, Any]:
        """Replace an agent's configuration."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release any held connections."""

    async def __aenter__(self) -> "InstanceAPI":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()


class LettaInstanceAPI(InstanceAPI):
    """Letta REST API adapter with bearer-token auth."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: UpstreamConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "LettaInstanceAPI":
        return cls(
            base_url=config.base_url,
            api_key=config.api_key.get_secret_value() if config.api_key else None,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            response = await self._client.request(
                method=method,
                url=path,
                headers=self._headers(),
                json=json,
            )
        except httpx.TimeoutException as e:
            logger.warning("upstream_timeout", operation=operation, path=path)
            raise UpstreamError(
                f"Upstream {operation} timed out",
                status=504,
                timed_out=True,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("upstream_transport_error", operation=operation, error=str(e))
            raise UpstreamError(f"Upstream {operation} failed: {e}") from e
        finally:
            UPSTREAM_LATENCY.labels(operation=operation).observe(
                time.perf_counter() - started
            )

        if response.status_code >= 400:
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text
            logger.warning(
                "upstream_error_response",
                operation=operation,
                status=response.status_code,
            )
            raise UpstreamError(
                f"Upstream {operation} failed with status {response.status_code}",
                status=response.status_code,
                body=body,
            )

        return response.json()

    async def create(self, config: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/agents", "create", json=config)

    async def fetch(self, agent_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/agents/{agent_id}", "fetch")

    async def update(self, agent_id: str, config: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"/agents/{agent_id}", "update", json=config)


class InMemoryInstanceAPI(InstanceAPI):
    """In-process stand-in for the remote API, for testing and development."""

    def __init__(self) -> None:
        self.agents: dict[str, dict[str, Any]] = {}
        self.fail_updates: UpstreamError | None = None

    async def create(self, config: dict[str, Any]) -> dict[str, Any]:
        agent_id = f"agent-{uuid4()}"
        self.agents[agent_id] = {**config, "id": agent_id}
        return dict(self.agents[agent_id])

    async def fetch(self, agent_id: str) -> dict[str, Any]:
        if agent_id not in self.agents:
            raise UpstreamError(f"Agent {agent_id} not found", status=404)
        return dict(self.agents[agent_id])

    async def update(self, agent_id: str, config: dict[str, Any]) -> dict[str, Any]:
        if self.fail_updates is not None:
            raise self.fail_updates
        if agent_id not in self.agents:
            raise UpstreamError(f"Agent {agent_id} not found", status=404)
        self.agents[agent_id] = {**config, "id": agent_id}
        return dict(self.agents[agent_id])
