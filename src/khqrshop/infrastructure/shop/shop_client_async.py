from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar
from types import TracebackType

import httpx
from pydantic import BaseModel, ValidationError

from ...application.order.dtos import CreateOrderDTO, OrderResponseDTO
from ...application.payment.dtos import (
    CheckPaymentRequestDTO,
    CheckPaymentResponseDTO,
    GeneratePaymentRequestDTO,
    GeneratePaymentResponseDTO,
)
from ...domain.errors import (
    MalformedOracleResponseError,
    OracleUnavailableError,
    ShopApiError,
)
from ..http.http_client import AsyncHttpClient

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _error_detail(response: httpx.Response) -> str:
    """FastAPI puts the reason in ``detail``; fall back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return response.text


class ShopClientAsync:
    """Asynchronous client for talking to the shop HTTP API.

    Every failure surfaces as ``ShopApiError``. The client also serves as the
    checkout watcher's settlement oracle through ``check_settled``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        # base_url is expected to already contain the API prefix (e.g. /api/v1)
        self._http = AsyncHttpClient(base_url, timeout=timeout, transport=transport)

    async def _post(
        self, path: str, body: Dict[str, Any], response_model: Type[ResponseT]
    ) -> ResponseT:
        try:
            resp = await self._http.post(path, json=body)
        except httpx.HTTPStatusError as e:
            raise ShopApiError(
                f"Shop API answered {e.response.status_code} for {path}: "
                f"{_error_detail(e.response)}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ShopApiError(f"Could not connect to the shop API: {e}") from e

        try:
            return response_model.model_validate(resp.json())
        except ValidationError as e:
            raise ShopApiError(f"Unexpected shop API body for {path}: {e}") from e
        except ValueError as e:
            raise ShopApiError(f"Shop API sent non-JSON body for {path}: {e}") from e

    async def generate_payment(
        self, dto: GeneratePaymentRequestDTO
    ) -> GeneratePaymentResponseDTO:
        return await self._post(
            "/payments/generate",
            dto.model_dump(mode="json", by_alias=True),
            GeneratePaymentResponseDTO,
        )

    async def check_payment(
        self, dto: CheckPaymentRequestDTO
    ) -> CheckPaymentResponseDTO:
        return await self._post(
            "/payments/check", dto.model_dump(), CheckPaymentResponseDTO
        )

    async def create_order(self, dto: CreateOrderDTO) -> OrderResponseDTO:
        return await self._post(
            "/orders", dto.model_dump(mode="json", by_alias=True), OrderResponseDTO
        )

    async def check_settled(self, fingerprint: str) -> bool:
        try:
            result = await self.check_payment(CheckPaymentRequestDTO(md5=fingerprint))
        except ShopApiError as e:
            if e.status_code is None and isinstance(e.__cause__, ValueError):
                raise MalformedOracleResponseError(str(e)) from e
            raise OracleUnavailableError(f"Payment check failed: {e}") from e
        return result.status == "PAID"

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ShopClientAsync":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
