"""JSON-over-HTTP transport for the remote fleet backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from roamr._constants import USER_AGENT
from roamr.config import RoamrConfig
from roamr.exceptions import RoamrTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the remote data source.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpJsonTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        ...


class HttpJsonTransport:
    """Sends JSON requests through a shared aiohttp session.

    Every failure mode (connection errors, timeouts, non-2xx responses,
    bodies that are not UTF-8 or not JSON) surfaces as
    :class:`RoamrTransportError`.
    """

    def __init__(self, config: RoamrConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send *payload* (if any) to *endpoint* and return the decoded body.

        An empty response body decodes to ``None``.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        body: str | None = None
        if payload is not None:
            headers["content-type"] = "application/json; charset=UTF-8"
            body = json.dumps(payload, separators=(",", ":"))

        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(method, url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise RoamrTransportError(
                        f"HTTP {resp.status} from {method} {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except RoamrTransportError:
            raise
        except UnicodeDecodeError as exc:
            raise RoamrTransportError(
                f"Undecodable body from {method} {endpoint}: {exc.reason}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise RoamrTransportError(
                f"{method} {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise RoamrTransportError(
                f"{method} {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RoamrTransportError(
                f"Invalid JSON from {method} {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
