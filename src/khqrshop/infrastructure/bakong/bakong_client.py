from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Type
from types import TracebackType

import httpx

from ...domain.errors import (
    DeepLinkError,
    MalformedOracleResponseError,
    MissingCredentialsError,
    OracleUnavailableError,
)
from ..http.http_client import AsyncHttpClient


class AsyncBakongClient:
    """Asynchronous client for the Bakong open API.

    Implements both the settlement oracle and the deep-link oracle.
    Transport failures become ``OracleUnavailableError``; bodies that do not
    follow the ``{"responseCode", "responseMessage", "data"}`` envelope become
    ``MalformedOracleResponseError``.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str],
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_token:
            raise MissingCredentialsError("Bakong API token is not configured")
        self._http = AsyncHttpClient(
            base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_token}"},
            transport=transport,
        )

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self._http.post(path, json=body)
        except httpx.HTTPStatusError as e:
            raise OracleUnavailableError(
                f"Bakong answered {e.response.status_code} for {path}"
            ) from e
        except httpx.RequestError as e:
            raise OracleUnavailableError(f"Could not connect to Bakong: {e}") from e

        try:
            result = resp.json()
        except ValueError as e:
            raise MalformedOracleResponseError(f"Bakong sent non-JSON body: {e}") from e
        if not isinstance(result, dict) or not isinstance(
            result.get("responseCode"), int
        ):
            raise MalformedOracleResponseError(
                f"Bakong response for {path} has no responseCode"
            )
        return result

    async def check_settled(self, fingerprint: str) -> bool:
        """Whether a transaction with this payload MD5 has been paid."""
        result = await self._post("/v1/check_transaction_by_md5", {"md5": fingerprint})
        data = result.get("data")
        return result["responseCode"] == 0 and isinstance(data, dict) and bool(
            data.get("hash")
        )

    async def create_deep_link(
        self,
        payload: str,
        callback_url: str,
        app_metadata: Mapping[str, Any],
    ) -> str:
        source_info = {**app_metadata, "appDeepLinkCallback": callback_url}
        result = await self._post(
            "/v1/generate_deeplink_by_qr", {"qr": payload, "sourceInfo": source_info}
        )
        if result["responseCode"] != 0:
            raise DeepLinkError(
                result.get("responseMessage") or "Failed to generate Bakong deep-link."
            )
        data = result.get("data")
        if not isinstance(data, dict) or not data.get("shortLink"):
            raise MalformedOracleResponseError(
                "Bakong deep-link response has no shortLink"
            )
        return str(data["shortLink"])

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncBakongClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
