"""HTTP client for the expense tracker API."""
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for any failed API request: transport error, non-2xx status or bad body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExpenseApiClient:
    """
    Thin wrapper over the four expense endpoints.

    `session` can be anything with requests-style `get`/`post` methods,
    which lets tests hand in an in-process test client.
    """

    def __init__(self, base_url: str = "http://localhost:5000", session=None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            response = getattr(self.session, method)(url, **kwargs)
        except requests.RequestException as e:
            raise ApiError(f"API request failed: {e}")

        if not 200 <= response.status_code < 300:
            raise ApiError(f"API request failed: HTTP error! status: {response.status_code}", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"API request failed: invalid JSON body ({e})", response.status_code)

    def list_expenses(self, category: Optional[str] = None, date: Optional[str] = None) -> List[Any]:
        params = {}
        if category:
            params["category"] = category
        if date:
            params["date"] = date
        data = self._request("get", "/api/expenses", params=params)
        if not isinstance(data, list):
            raise ApiError("Invalid response format: expected array")
        return data

    def create_expense(self, amount: float, category: str, date: str, description: str = "") -> Dict[str, Any]:
        body = {"amount": amount, "category": category, "date": date, "description": description}
        return self._request("post", "/api/expenses", json=body)

    def total_for_range(self, start: str, end: str) -> Any:
        data = self._request("get", "/api/expenses/total", params={"start": start, "end": end})
        if not isinstance(data, dict):
            raise ApiError("Invalid response format: expected object")
        return data.get("total")

    def totals_by_category(self) -> List[Dict[str, Any]]:
        data = self._request("get", "/api/expenses/by-category")
        if not isinstance(data, list):
            raise ApiError("Invalid response format: expected array")
        return data
