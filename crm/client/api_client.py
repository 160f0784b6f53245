from __future__ import annotations

import logging
from typing import Any

import httpx

from crm.core.config import API_BASE_URL

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"API request failed with status {status_code}")
        self.status_code = status_code
        self.payload = payload

    @property
    def field_errors(self) -> list[dict[str, Any]]:
        if isinstance(self.payload, dict):
            return list(self.payload.get("errors") or [])
        return []

    @property
    def message(self) -> str | None:
        if isinstance(self.payload, dict):
            return self.payload.get("error")
        return None


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value not in (None, "")}


class CRMClient:
    """Thin HTTP client over the CRM REST API, one method per endpoint.

    ``http`` may be any ``httpx.Client`` (including Starlette's TestClient);
    when omitted a client bound to ``base_url`` is created and owned here.
    """

    def __init__(self, base_url: str = API_BASE_URL, http: httpx.Client | None = None):
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CRMClient":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._http.request(method, path, **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        if response.status_code >= 400:
            logger.info("api error method=%s path=%s status=%s", method, path, response.status_code)
            raise ApiError(response.status_code, payload)
        return payload

    # customers

    def list_customers(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        q: str | None = None,
        city: str | None = None,
        state: str | None = None,
        pincode: str | None = None,
    ) -> dict[str, Any]:
        params = _clean_params(
            {"page": page, "limit": limit, "q": q, "city": city, "state": state, "pincode": pincode}
        )
        return self._request("GET", "/api/customers", params=params)

    def get_customer(self, customer_id: int) -> dict[str, Any]:
        return self._request("GET", f"/api/customers/{customer_id}")

    def create_customer(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/customers", json=data)

    def update_customer(self, customer_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/api/customers/{customer_id}", json=data)

    def delete_customer(self, customer_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/api/customers/{customer_id}")

    # addresses

    def add_address(self, customer_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/api/customers/{customer_id}/addresses", json=data)

    def update_address(self, address_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/api/addresses/{address_id}", json=data)

    def delete_address(self, address_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/api/addresses/{address_id}")

    # history

    def list_orders(self, customer_id: int) -> list[dict[str, Any]]:
        return self._request("GET", f"/api/customers/{customer_id}/orders")["orders"]

    def list_payments(self, customer_id: int) -> list[dict[str, Any]]:
        return self._request("GET", f"/api/customers/{customer_id}/payments")["payments"]
