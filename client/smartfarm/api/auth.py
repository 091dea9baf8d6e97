"""
Authentication endpoints: login, current user and logout.
"""

from smartfarm.api import router
from smartfarm.api.client import ApiClient
from smartfarm.schemas.user import AuthData, AuthResponse, UserLogin


class AuthAPI(ApiClient):

    async def login(self, login_data: UserLogin) -> AuthData:
        """Authenticate and receive the user and bearer token."""
        response = await self._request(
            "POST",
            router.AUTH_LOGIN,
            json=login_data.model_dump(mode="json"),
            fallback_message="Login failed",
        )
        return AuthResponse.model_validate(response.json()).data

    async def me(self) -> AuthData:
        """Validate the current token and return the user it belongs to."""
        response = await self._request("GET", router.AUTH_ME, fallback_message="Session check failed")
        return AuthResponse.model_validate(response.json()).data

    async def logout(self) -> None:
        await self._request("POST", router.AUTH_LOGOUT, fallback_message="Logout failed")
