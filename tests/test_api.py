"""HTTP tests for the v1 routes, run against the in-memory backend."""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import Request
from fastapi.exceptions import HTTPException

from cocktail_catalog_api.app.core.exceptions import AuthRequiredError, DuplicateSubmissionError
from cocktail_catalog_api.app.main import catalog_error_handler, unhandled_exception_handler


class TestCocktailRoutes:
    @pytest.mark.unit
    def test_list_and_filter(self, client, mojito, storage, bob) -> None:
        storage.seed("cocktails", name="Negroni", ingredients=["Gin"], price=11.0, user_id=bob.id)

        response = client.get("/api/v1/items")
        filtered = client.get("/api/v1/items", params={"ingredient": "Gin", "max_price": 20})

        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["Mojito", "Negroni"]
        assert [item["name"] for item in filtered.json()] == ["Negroni"]

    @pytest.mark.unit
    def test_negative_price_filter_is_bad_request(self, client) -> None:
        response = client.get("/api/v1/items", params={"min_price": -1})

        assert response.status_code == 400
        assert "min_price" in response.json()["detail"]

    @pytest.mark.unit
    def test_get_unknown_item(self, client) -> None:
        response = client.get("/api/v1/items/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Cocktail 999 not found"}

    @pytest.mark.unit
    def test_create_requires_authentication(self, client, storage) -> None:
        response = client.post("/api/v1/items", json={"name": "Mojito", "price": 8.5})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert storage.calls == []

    @pytest.mark.unit
    def test_create_rejects_unknown_token(self, client) -> None:
        response = client.post(
            "/api/v1/items",
            json={"name": "Mojito", "price": 8.5},
            headers={"Authorization": "Bearer stolen"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    @pytest.mark.unit
    def test_create_validates_body(self, client, alice_headers, storage) -> None:
        response = client.post("/api/v1/items", json={"price": 5}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("name:")
        assert storage.calls == []

    @pytest.mark.unit
    def test_create_update_delete(self, client, backend, alice_headers, bob_headers) -> None:
        # Create
        created = client.post(
            "/api/v1/items",
            json={"name": "Mojito", "price": 8.5, "ingredients": "Rum, Lime, Mint"},
            headers=alice_headers,
        )
        assert created.status_code == 201
        item = created.json()
        assert item["user_id"] == "user-alice"
        assert item["ingredients"] == ["Rum", "Lime", "Mint"]
        assert "alice-token" in backend.tokens_seen

        # Another user cannot edit
        forbidden = client.put(f"/api/v1/items/{item['id']}", json={"price": 1}, headers=bob_headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["detail"] == f"Only the owner can modify cocktail {item['id']}"

        # Owner edits one field
        updated = client.put(f"/api/v1/items/{item['id']}", json={"price": 9.0}, headers=alice_headers)
        assert updated.status_code == 200
        assert updated.json()["name"] == "Mojito"
        assert updated.json()["price"] == 9.0

        # Delete twice
        assert client.delete(f"/api/v1/items/{item['id']}", headers=alice_headers).status_code == 204
        assert client.delete(f"/api/v1/items/{item['id']}", headers=alice_headers).status_code == 204
        assert client.get(f"/api/v1/items/{item['id']}").status_code == 404


class TestCatalogExtras:
    @pytest.mark.unit
    def test_rating_routes(self, client, mojito, alice_headers, bob_headers) -> None:
        url = f"/api/v1/items/{mojito['id']}/rating"

        assert client.put(url, json={"score": 6}, headers=alice_headers).status_code == 400
        client.put(url, json={"score": 4}, headers=alice_headers)
        response = client.put(url, json={"score": 5}, headers=bob_headers)

        assert response.status_code == 200
        assert response.json() == {"cocktail_id": str(mojito["id"]), "average": 4.5, "count": 2}
        assert client.get(url).json()["count"] == 2

    @pytest.mark.unit
    def test_favorite_toggle_and_list(self, client, mojito, alice_headers) -> None:
        toggled = client.post(f"/api/v1/items/{mojito['id']}/favorite", headers=alice_headers)
        favorites = client.get("/api/v1/favorites", headers=alice_headers)

        assert toggled.json() == {"cocktail_id": str(mojito["id"]), "is_favorite": True}
        assert [item["name"] for item in favorites.json()] == ["Mojito"]
        assert client.get("/api/v1/favorites").status_code == 401

    @pytest.mark.unit
    def test_comment_routes(self, client, mojito, alice_headers) -> None:
        url = f"/api/v1/items/{mojito['id']}/comments"

        posted = client.post(url, json={"content": "  Fresh!  "}, headers=alice_headers)
        empty = client.post(url, json={"content": "   "}, headers=alice_headers)
        listed = client.get(url)

        assert posted.status_code == 201
        assert posted.json()["content"] == "Fresh!"
        assert empty.status_code == 400
        assert [comment["content"] for comment in listed.json()] == ["Fresh!"]
        assert client.get("/api/v1/items/999/comments").status_code == 404

    @pytest.mark.unit
    def test_catalog_for_anonymous_and_signed_in_viewer(self, client, mojito, storage, alice, alice_headers) -> None:
        storage.seed("favorites", user_id=alice.id, cocktail_id=mojito["id"])
        storage.seed("ratings", user_id="someone", cocktail_id=mojito["id"], score=3)

        anonymous = client.get("/api/v1/catalog").json()["entries"]
        signed_in = client.get("/api/v1/catalog", headers=alice_headers).json()["entries"]
        bad_token = client.get("/api/v1/catalog", headers={"Authorization": "Bearer nope"})

        assert anonymous[0]["is_favorite"] is False
        assert anonymous[0]["average_rating"] == 3.0
        assert signed_in[0]["is_favorite"] is True
        assert bad_token.status_code == 200

    @pytest.mark.unit
    def test_rejected_token_reads_as_anonymous(self, client, backend, mojito) -> None:
        # Arrange
        expired = {"Authorization": "Bearer expired-token"}

        # Act
        catalog = client.get("/api/v1/catalog", headers=expired)
        items = client.get("/api/v1/items", headers=expired)

        # Assert: the backend only ever saw the anon role
        assert catalog.status_code == 200
        assert items.status_code == 200
        assert [entry["cocktail"]["name"] for entry in catalog.json()["entries"]] == ["Mojito"]
        assert backend.tokens_seen == [None, None]

    @pytest.mark.unit
    def test_accepted_token_is_forwarded_to_storage(self, client, backend, mojito, alice_headers) -> None:
        client.get("/api/v1/catalog", headers=alice_headers)

        assert backend.tokens_seen == ["alice-token"]

    @pytest.mark.unit
    def test_delete_refused_by_backend_is_forbidden(self, client, storage, mojito, alice_headers) -> None:
        storage.policy_protected.add("cocktails")

        response = client.delete(f"/api/v1/items/{mojito['id']}", headers=alice_headers)

        assert response.status_code == 403
        assert client.get(f"/api/v1/items/{mojito['id']}").status_code == 200

    @pytest.mark.unit
    def test_backend_failure_is_500_with_backend_message(self, client, storage) -> None:
        storage.fail_tables["cocktails"] = "upstream connect error"

        response = client.get("/api/v1/catalog")

        assert response.status_code == 500
        assert response.json() == {"detail": "upstream connect error"}

    @pytest.mark.unit
    def test_health(self, client) -> None:
        response = client.get("/api/v1/info/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestErrorHandlers:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_duplicate_submission_is_conflict(self) -> None:
        request = Mock(spec=Request)
        request.method = "POST"
        request.url.path = "/api/v1/items/1/favorite"

        response = await catalog_error_handler(request, DuplicateSubmissionError("toggle_favorite"))

        assert response.status_code == 409
        assert json.loads(response.body) == {"detail": "'toggle_favorite' is already being submitted"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_auth_required_carries_challenge(self) -> None:
        request = Mock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/v1/favorites"

        response = await catalog_error_handler(request, AuthRequiredError())

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_exception_is_generic_500(self) -> None:
        # Arrange
        request = Mock(spec=Request)
        exception = RuntimeError("boom")

        # Act
        with patch("cocktail_catalog_api.app.main.logger") as mock_logger:
            response = await unhandled_exception_handler(request, exception)

        # Assert
        assert response.status_code == 500
        assert json.loads(response.body) == {"detail": "An unexpected error occurred."}
        mock_logger.exception.assert_called_once_with("Unhandled exception occurred", exc_info=exception)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_exceptions_are_reraised(self) -> None:
        with pytest.raises(HTTPException):
            await unhandled_exception_handler(Mock(spec=Request), HTTPException(status_code=418))
