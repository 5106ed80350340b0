"""HTTP transport for job payloads.

The job endpoint serves the request payload on GET and accepts the proof batch
on POST to the same URL. Bodies are opaque bytes in both directions.
"""

import logging
from typing import Optional

import requests

from protocol.errors import TransportError

log = logging.getLogger(__name__)


class HttpTransport:
    """Blocking fetch/deliver against a single job URL."""

    def __init__(self, url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self) -> bytes:
        log.info("Fetching job from %s", self.url)
        resp = self._request("GET")
        log.info("Fetched %d bytes", len(resp.content))
        return resp.content

    def deliver(self, body: bytes) -> None:
        log.info("Delivering %d bytes to %s", len(body), self.url)
        self._request(
            "POST",
            data=body,
            headers={"Content-Type": "application/octet-stream"},
        )

    def _request(self, method: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, self.url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {self.url} failed: {e}") from e
        if not resp.ok:
            raise TransportError(
                f"{method} {self.url} returned HTTP {resp.status_code}",
                status=resp.status_code,
            )
        return resp

    def close(self) -> None:
        self.session.close()
