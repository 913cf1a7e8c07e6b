"""
TourStack Backend — Google REST API Client Base
=================================================

What:  Shared plumbing for the Google Cloud REST APIs TourStack proxies
       (Translate v2, Text-to-Speech v1, Vision v1).
Why:   All three take the API key as a `key` query parameter, need the
       same Referer header (the key is restricted to web referrers) and
       report failures in the same {"error": {"code", "message", ...}} shape.
How:   One outbound httpx call per request. Non-2xx answers become an
       UpstreamError carrying the upstream status, message and payload,
       which the global handler relays to the client unchanged.
Who:   Subclassed by GoogleTranslateService, GoogleTTSService, VisionService.

Deliberately absent: retries, backoff and circuit breaking. A failed call
fails the request; the editor shows the error and the user tries again.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from tourstack.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class GoogleAPIClient:
    """
    Base class for a Google REST API.

    Args:
        api_key:    Sent as ?key=. May be empty; Google then answers 403 and
                    that answer is relayed.
        base_url:   API root, e.g. https://texttospeech.googleapis.com/v1
        referer:    Referer header value.
        transport:  Optional httpx transport (tests pass httpx.MockTransport).
    """

    service_name = "Google API"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        referer: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.referer = referer
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def request(
        self,
        method: str,
        path: str = "",
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Perform one call and return the decoded JSON body.

        Raises:
            UpstreamError: non-2xx status, an error object in the body,
                           a transport failure (502) or a non-JSON body (502).
        """
        url = f"{self.base_url}{path}"
        query = {"key": self.api_key}
        if params:
            query.update(params)

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    url,
                    params=query,
                    json=json,
                    headers={"Referer": self.referer},
                )
            except httpx.HTTPError as e:
                logger.error("%s request to %s failed: %s", self.service_name, path or "/", str(e))
                raise UpstreamError(
                    status_code=502,
                    message=f"Failed to connect to {self.service_name}",
                    context={"url": url, "error": str(e)},
                ) from e

        if response.is_error:
            raise self._upstream_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                status_code=502,
                message=f"Invalid response from {self.service_name}",
                details=response.text,
            ) from e

        # Translate v2 can report errors inside a 200 body
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = data["error"]
            raise UpstreamError(
                status_code=int(error.get("code") or 500),
                message=error.get("message") or f"{self.service_name} error",
                details=error,
            )
        return data

    def _upstream_error(self, response: httpx.Response) -> UpstreamError:
        try:
            payload: Any = response.json()
        except ValueError:
            payload = response.text

        message = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            message = payload["error"].get("message")
        if not message:
            message = f"{self.service_name} request failed with status {response.status_code}"

        logger.error(
            "%s error %d: %s",
            self.service_name,
            response.status_code,
            message,
        )
        return UpstreamError(
            status_code=response.status_code,
            message=message,
            details=payload,
        )
