# src/libs/gst-sync-engine/src/gst_sync_engine/gateway.py
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from compliance_common import config
from compliance_common.logging_utils import correlation_id_var

from .constants import (
    GET_GST_DETAILS_METHOD,
    GET_GSTIN_STATUS_METHOD,
    GET_PARTY_DETAILS_FOR_SUBCONTRACTING_METHOD,
)

logger = logging.getLogger(__name__)


class ComplianceGateway(Protocol):
    """The remote endpoints the engine depends on."""

    async def get_gst_details(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    async def get_gstin_status(self, gstin: str, transaction_date: Any) -> Optional[Dict[str, Any]]:
        ...

    async def get_party_details_for_subcontracting(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...


class HttpComplianceGateway:
    """
    Calls whitelisted server methods over HTTP ('/api/method/<dotted.path>')
    and returns their 'message' member. Transport and HTTP errors are raised
    as-is; nothing is retried here.
    """
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        token = config.COMPLIANCE_API_TOKEN if api_token is None else api_token
        if token:
            headers["Authorization"] = f"token {token}"

        self._client = client or httpx.AsyncClient(
            base_url=base_url or config.COMPLIANCE_API_BASE_URL,
            headers=headers,
            timeout=timeout or config.COMPLIANCE_API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def call(self, method: str, args: Dict[str, Any]) -> Any:
        logger.info(f"Calling remote method '{method}'.")
        response = await self._client.post(
            f"/api/method/{method}",
            json=args,
            headers={"X-Correlation-ID": correlation_id_var.get()},
        )
        response.raise_for_status()

        body = response.json() if response.content else {}
        return body.get("message") or None

    async def get_gst_details(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.call(GET_GST_DETAILS_METHOD, payload)

    async def get_gstin_status(self, gstin: str, transaction_date: Any) -> Optional[Dict[str, Any]]:
        args = {
            "gstin": gstin,
            "transaction_date": str(transaction_date) if transaction_date else None,
            "is_request_from_ui": 1,
        }
        return await self.call(GET_GSTIN_STATUS_METHOD, args)

    async def get_party_details_for_subcontracting(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.call(GET_PARTY_DETAILS_FOR_SUBCONTRACTING_METHOD, payload)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpComplianceGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
