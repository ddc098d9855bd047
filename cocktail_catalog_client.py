"""Cocktail catalog API client.

A thin wrapper around the catalog's ``/api/v1`` routes for scripts and
front ends written in Python.  It uses the ``requests`` library and
never raises for HTTP or connection failures: every method returns a
tuple ``(data, error)`` where exactly one side is meaningful.
``error`` is a dictionary with the keys ``status_code`` (``None`` when
the server could not be reached) and ``message`` (the ``detail`` sent
by the API).

Sign in against the hosted auth service first and pass the resulting
access token as ``access_token``; it is sent as a bearer token on
every request.  Read-only calls work without one.

Example::

    client = CocktailCatalogClient(base_url="http://localhost:8000", access_token=token)
    cocktail, error = client.create_item({"name": "Mojito", "price": 8.5})
    if error:
        print(error["message"])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class CocktailCatalogClient:
    """Client for the cocktail catalog API."""

    def __init__(
        self,
        *,
        base_url: str,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        api_prefix: str = "/api/v1",
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            access_token: Optional access token issued by the auth
                service.  Required for every write.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            api_prefix: Path the versioned routes are mounted under.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/") + api_prefix
        self.access_token = access_token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request to the API.

        Returns:
            A tuple ``(data, error)``. ``data`` contains the parsed JSON
            response on success and ``error`` is ``None``. On failure,
            ``data`` is ``None`` and ``error`` describes the issue.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params or None,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Cocktails
    # ------------------------------------------------------------------
    def list_items(
        self,
        *,
        query: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        ingredient: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Return cocktails ordered by name, optionally filtered."""
        params = {"query": query, "min_price": min_price, "max_price": max_price, "ingredient": ingredient}
        data, error = self._request("GET", "/items", params=params)
        return data or [], error

    def get_item(self, item_id: Any) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/items/{item_id}")

    def create_item(self, fields: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Create a cocktail.  ``fields`` needs at least ``name`` and ``price``."""
        return self._request("POST", "/items", json_body=fields)

    def update_item(self, item_id: Any, fields: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Update the given fields of a cocktail; the others keep their values."""
        return self._request("PUT", f"/items/{item_id}", json_body=fields)

    def delete_item(self, item_id: Any) -> Tuple[bool, Optional[Error]]:
        """Delete a cocktail.  Returns ``(True, None)`` on success."""
        _, error = self._request("DELETE", f"/items/{item_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Catalog page and per-cocktail extras
    # ------------------------------------------------------------------
    def load_catalog(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Return the catalog entries (cocktail plus rating, favorite and comments)."""
        data, error = self._request("GET", "/catalog")
        if error:
            return [], error
        return (data or {}).get("entries", []), None

    def set_rating(self, item_id: Any, score: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Rate a cocktail from 1 to 5; returns the new ``average`` and ``count``."""
        return self._request("PUT", f"/items/{item_id}/rating", json_body={"score": score})

    def get_rating(self, item_id: Any) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/items/{item_id}/rating")

    def toggle_favorite(self, item_id: Any) -> Tuple[Optional[bool], Optional[Error]]:
        """Flip the favorite state of a cocktail and return the new state."""
        data, error = self._request("POST", f"/items/{item_id}/favorite")
        if error:
            return None, error
        return bool((data or {}).get("is_favorite")), None

    def list_favorites(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", "/favorites")
        return data or [], error

    def list_comments(self, item_id: Any) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", f"/items/{item_id}/comments")
        return data or [], error

    def add_comment(self, item_id: Any, content: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("POST", f"/items/{item_id}/comments", json_body={"content": content})

    def health(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", "/info/health")
