from __future__ import annotations

import asyncio
import errno
import logging
import socket
import ssl
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union
from urllib.parse import urljoin

import aiohttp

from .checker_config import CheckConfig

logger = logging.getLogger(__name__)

# HEAD answered with "method not supported"; retry the same attempt with GET.
_HEAD_UNSUPPORTED = {405, 501}

_TRANSIENT_ERRNOS = {
    errno.ECONNRESET: "connection_reset",
    errno.ECONNABORTED: "connection_aborted",
    errno.ETIMEDOUT: "timeout",
    errno.EPIPE: "connection_reset",
}


@dataclass(frozen=True)
class Success:
    final_url: str


@dataclass(frozen=True)
class TransientFailure:
    reason: str


@dataclass(frozen=True)
class TerminalFailure:
    reason: str


Failure = Union[TransientFailure, TerminalFailure]
Outcome = Union[Success, TransientFailure, TerminalFailure]
Probe = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class Verification:
    """Raw outcome of one URL's attempt loop."""

    outcome: Outcome
    attempts: int


class HttpStatusError(Exception):
    """The server answered, but with an error status."""

    def __init__(self, status: int, url: str = "") -> None:
        super().__init__(f"HTTP {status} for {url}" if url else f"HTTP {status}")
        self.status = status
        self.url = url


def _classify_os_error(exc: OSError) -> Failure:
    if isinstance(exc, TimeoutError):
        return TransientFailure("timeout")
    if isinstance(exc, socket.gaierror):
        return TerminalFailure("dns_error")
    if isinstance(exc, ssl.SSLError):
        return TerminalFailure("ssl_error")
    if isinstance(exc, ConnectionRefusedError) or exc.errno == errno.ECONNREFUSED:
        return TerminalFailure("connection_refused")
    if isinstance(exc, ConnectionResetError):
        return TransientFailure("connection_reset")
    if isinstance(exc, ConnectionAbortedError):
        return TransientFailure("connection_aborted")
    reason = _TRANSIENT_ERRNOS.get(exc.errno or 0)
    if reason:
        return TransientFailure(reason)
    return TransientFailure("socket_error")


def classify_failure(exc: BaseException) -> Failure:
    """Map any transport error onto a transient or terminal failure.

    Only connection-level flakiness is retryable. Anything the remote side
    answered explicitly (error status, TLS rejection, unknown host) and any
    error this function does not recognise is terminal.
    """

    if isinstance(exc, HttpStatusError):
        return TerminalFailure(f"http_{exc.status}")
    if isinstance(exc, aiohttp.TooManyRedirects):
        return TerminalFailure("too_many_redirects")
    if isinstance(exc, aiohttp.ClientResponseError):
        return TerminalFailure(f"http_{exc.status}")
    # TimeoutError is an OSError subclass on current interpreters; check first.
    if isinstance(exc, asyncio.TimeoutError):
        return TransientFailure("timeout")
    if isinstance(exc, aiohttp.InvalidURL):
        return TerminalFailure("invalid_url")
    if isinstance(exc, aiohttp.ClientSSLError):
        return TerminalFailure("ssl_error")
    if isinstance(exc, aiohttp.ClientConnectorError):
        os_error = getattr(exc, "os_error", None)
        if isinstance(os_error, OSError):
            return _classify_os_error(os_error)
        return TransientFailure("socket_error")
    if isinstance(exc, aiohttp.ServerDisconnectedError):
        return TransientFailure("server_disconnected")
    if isinstance(exc, aiohttp.ClientPayloadError):
        return TransientFailure("payload_error")
    if isinstance(exc, OSError):
        return _classify_os_error(exc)
    if isinstance(exc, ValueError):
        return TerminalFailure("invalid_url")
    if isinstance(exc, aiohttp.ClientError):
        return TerminalFailure("client_error")
    return TerminalFailure(f"unexpected_{type(exc).__name__}")


class LinkVerifier:
    """Checks one URL at a time with bounded retries and linear backoff.

    Either an ``aiohttp.ClientSession`` (real network) or a ``probe`` coroutine
    function returning the final URL must be supplied.
    """

    def __init__(
        self,
        config: CheckConfig,
        session: Optional[aiohttp.ClientSession] = None,
        probe: Optional[Probe] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if session is None and probe is None:
            raise ValueError("LinkVerifier needs a session or a probe")
        self.config = config
        self.session = session
        self._probe: Probe = probe or self._probe_once
        self._sleep = sleep

    async def verify(self, url: str) -> Verification:
        max_attempts = self.config.max_attempts
        failure: Failure = TerminalFailure("not_attempted")
        attempt = 0
        for attempt in range(1, max_attempts + 1):
            try:
                # One deadline covers the whole attempt, HEAD and any GET fallback.
                final_url = await asyncio.wait_for(self._probe(url), self.config.timeout)
            except Exception as exc:
                failure = classify_failure(exc)
                if failure.reason.startswith("unexpected_"):
                    logger.warning("unexpected error probing %s: %r", url, exc)
                if isinstance(failure, TerminalFailure):
                    logger.debug("terminal failure for %s: %s", url, failure.reason)
                    return Verification(failure, attempt)
                if attempt < max_attempts:
                    delay = self.config.retry_backoff * attempt
                    logger.warning(
                        "retrying %s (%d/%d) after %s; waiting %.1fs",
                        url,
                        attempt,
                        self.config.max_retries,
                        failure.reason,
                        delay,
                    )
                    await self._sleep(delay)
                continue
            logger.debug("attempt %d reached %s -> %s", attempt, url, final_url)
            return Verification(Success(final_url), attempt)
        logger.debug("retries exhausted for %s: %s", url, failure.reason)
        return Verification(failure, attempt)

    async def _probe_once(self, url: str) -> str:
        method = "GET" if self.config.use_get else "HEAD"
        status, final_url = await self._request(method, url)
        if method == "HEAD" and status in _HEAD_UNSUPPORTED:
            status, final_url = await self._request("GET", url)
        if status >= 400:
            raise HttpStatusError(status, final_url)
        return final_url

    async def _request(self, method: str, url: str) -> Tuple[int, str]:
        assert self.session is not None
        follow = self.config.max_redirects > 0
        request_kwargs: Dict[str, Any] = {"allow_redirects": follow}
        if follow:
            # aiohttp gives up when the hop counter reaches max_redirects.
            request_kwargs["max_redirects"] = self.config.max_redirects + 1
        async with self.session.request(
            method,
            url,
            timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            **request_kwargs,
        ) as resp:
            status = resp.status
            if resp.history:
                return status, str(resp.url)
            location = resp.headers.get("Location")
            if not follow and 300 <= status < 400 and location:
                return status, urljoin(url, location)
            return status, url


__all__ = [
    "Success",
    "TransientFailure",
    "TerminalFailure",
    "Failure",
    "Outcome",
    "Probe",
    "Verification",
    "HttpStatusError",
    "classify_failure",
    "LinkVerifier",
]
