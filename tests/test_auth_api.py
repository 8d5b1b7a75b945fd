"""HTTP tests for registration, login, token refresh and /me."""
import httpx
import pytest
import respx

from geofence.config import get_settings
from tests.fakes import PAULISTA_RESULT, SAO_PAULO_RING

API = "/api/v1"
GEOCODE_URL = get_settings().GEOCODING_BASE_URL

PASSWORD = "password123"


@pytest.fixture
def google():
    with respx.mock(assert_all_called=False) as router:
        route = router.get(GEOCODE_URL).mock(
            return_value=httpx.Response(200, json={"status": "OK", "results": [PAULISTA_RESULT]})
        )
        yield route


def register(client, email="test@example.com", **location):
    location = location or {"coordinates": [-46.6559, -23.5614]}
    return client.post(
        f"{API}/auth/register",
        json={"name": "Test User", "email": email, "password": PASSWORD, **location},
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestRegister:
    def test_coordinates_are_reverse_geocoded(self, auth_client, users, google):
        response = register(auth_client)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "test@example.com"
        assert body["user"]["coordinates"] == [-46.6559, -23.5614]
        assert body["user"]["address"]["city"] == "São Paulo"
        assert body["user"]["address"]["state"] == "SP"
        assert body["user"]["region_ids"] == []
        assert body["token_type"] == "bearer"
        assert body["access_token"] and body["refresh_token"]

        assert google.calls.last.request.url.params["latlng"] == "-23.5614,-46.6559"
        stored = next(iter(users.users.values()))
        assert stored.password_hash != PASSWORD
        assert stored.formatted_address == PAULISTA_RESULT["formatted_address"]

    def test_address_is_geocoded(self, auth_client, users, google):
        response = register(
            auth_client,
            address={"street": "Avenida Paulista", "number": "1578", "city": "São Paulo"},
        )

        assert response.status_code == 201
        assert response.json()["user"]["coordinates"] == [-46.6559, -23.5614]
        assert response.json()["user"]["address"]["street"] == "Avenida Paulista"
        assert google.calls.last.request.url.params["address"] == (
            "1578 Avenida Paulista, São Paulo"
        )

    def test_geocoding_failure_aborts_registration(self, auth_client, users, google):
        google.mock(return_value=httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))

        response = register(auth_client)

        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "message": "No geocoding results for the given input",
        }
        assert users.users == {}

    def test_geocoding_timeout_aborts_registration(self, auth_client, users, google):
        google.mock(side_effect=httpx.ConnectTimeout("timed out"))

        response = register(auth_client, address={"city": "São Paulo"})

        assert response.status_code == 400
        assert response.json()["message"] == "Geocoding request timed out"
        assert users.users == {}

    def test_duplicate_email(self, auth_client, users, google):
        assert register(auth_client).status_code == 201

        response = register(auth_client)

        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "Email already registered"}
        assert len(users.users) == 1

    def test_requires_one_location_source(self, auth_client, google):
        response = auth_client.post(
            f"{API}/auth/register",
            json={"name": "Test User", "email": "test@example.com", "password": PASSWORD},
        )

        assert response.status_code == 400
        assert "Please provide coordinates or address." in response.json()["message"]
        assert not google.called

    def test_short_password(self, auth_client, google):
        response = auth_client.post(
            f"{API}/auth/register",
            json={
                "name": "Test User",
                "email": "test@example.com",
                "password": "short",
                "coordinates": [-46.6559, -23.5614],
            },
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("password")


class TestLoginAndRefresh:
    def test_login(self, auth_client, google):
        register(auth_client)

        response = auth_client.post(
            f"{API}/auth/login", json={"email": "test@example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]
        assert response.json()["expires_in"] == get_settings().ACCESS_TOKEN_EXPIRE_HOURS * 3600

    @pytest.mark.parametrize(
        ("email", "password"),
        [("test@example.com", "wrong-password"), ("nobody@example.com", PASSWORD)],
    )
    def test_bad_credentials(self, auth_client, google, email, password):
        register(auth_client)

        response = auth_client.post(
            f"{API}/auth/login", json={"email": email, "password": password}
        )

        assert response.status_code == 401
        assert response.json() == {"status": "error", "message": "Invalid email or password"}

    def test_refresh(self, auth_client, google):
        tokens = register(auth_client).json()

        response = auth_client.post(
            f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )

        assert response.status_code == 200
        me = auth_client.get(f"{API}/auth/me", headers=bearer(response.json()["access_token"]))
        assert me.status_code == 200

    def test_access_token_cannot_refresh(self, auth_client, google):
        tokens = register(auth_client).json()

        response = auth_client.post(
            f"{API}/auth/refresh", json={"refresh_token": tokens["access_token"]}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token type"

    def test_refresh_token_cannot_authenticate(self, auth_client, google):
        tokens = register(auth_client).json()

        response = auth_client.get(f"{API}/auth/me", headers=bearer(tokens["refresh_token"]))

        assert response.status_code == 401


class TestMe:
    def test_lists_owned_region_ids(self, auth_client, google):
        tokens = register(auth_client).json()
        headers = bearer(tokens["access_token"])

        created = auth_client.post(
            f"{API}/regions",
            json={
                "name": "Test Region",
                "polygon": {"type": "Polygon", "coordinates": [SAO_PAULO_RING]},
            },
            headers=headers,
        )
        me = auth_client.get(f"{API}/auth/me", headers=headers)

        assert created.status_code == 201
        assert created.json()["region"]["user"]["id"] == tokens["user"]["id"]
        assert me.status_code == 200
        assert me.json()["region_ids"] == [created.json()["region"]["id"]]

    def test_token_for_deleted_user(self, auth_client, users, google):
        tokens = register(auth_client).json()
        users.users.clear()

        response = auth_client.get(f"{API}/auth/me", headers=bearer(tokens["access_token"]))

        assert response.status_code == 401
        assert response.json()["message"] == "User not found"
