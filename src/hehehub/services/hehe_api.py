"""HTTP client for the HeheHub API (posts, users, scores, rankings).

The API owns users, posts and HEHE scores. This client is the posts source
and the score sink for burn rewards. Authenticated endpoints use the bearer
token held in the injected SessionStore.

Payloads are coerced the way the web client does it: missing or invalid
numbers become 0 and missing strings become "".
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from hehehub.models.inventory import Post
from hehehub.services.exceptions import HeheApiAuthError, HeheApiError
from hehehub.services.session import SESSION_TOKEN_KEY, SESSION_USER_KEY, SessionStore

logger = structlog.get_logger()

# Upper bound on pages walked by fetch_user_posts
MAX_POST_PAGES = 100


@dataclass(frozen=True)
class UserProfile:
    """The authenticated user's profile."""

    id: str
    username: str
    address: str
    hehe_score: int


@dataclass(frozen=True)
class RankedUser:
    """A leaderboard row."""

    id: str
    username: str
    hehe_score: int
    avatar_url: str | None = None


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _coerce_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_post(raw: dict[str, Any]) -> Post:
    """Reduce an API post payload to its image URL and like count."""
    return Post(
        content_ref=_coerce_str(raw.get("imageUrl")),
        like_count=_coerce_int(raw.get("likes")),
    )


class HeheApiClient:
    """Async client for the HeheHub API."""

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: HeheHub API origin (e.g. https://hehehub.xyz)
            session_store: Holds the bearer token under "token"
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.session_store = session_store
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "HeheApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self.session_store.get(SESSION_TOKEN_KEY)
        if not token:
            raise HeheApiAuthError("No session token found")
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> Any:
        headers = self._auth_headers() if authenticated else {}

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "hehe_api.request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise HeheApiError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            logger.warning("hehe_api.unauthorized", path=path, status=response.status_code)
            raise HeheApiAuthError(f"{method} {path} rejected session token")

        if response.is_error:
            logger.error("hehe_api.http_error", path=path, status=response.status_code)
            raise HeheApiError(
                f"HTTP error! status: {response.status_code}", status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HeheApiError(f"{method} {path} returned invalid JSON") from e

    async def fetch_user_posts(self) -> list[Post]:
        """All of the authenticated user's posts, walking every page.

        Raises:
            HeheApiAuthError: No token or token rejected
            HeheApiError: Request failed
        """
        posts: list[Post] = []
        page = 1
        total_pages = 1

        while page <= min(total_pages, MAX_POST_PAGES):
            data = await self._request("GET", "/api/posts/user", params={"page": page})
            data = data if isinstance(data, dict) else {}
            raw_posts = data.get("posts")
            posts.extend(parse_post(p) for p in raw_posts or [] if isinstance(p, dict))

            pagination = data.get("pagination")
            if isinstance(pagination, dict):
                total_pages = max(1, _coerce_int(pagination.get("totalPages")))
            page += 1

        logger.debug("hehe_api.posts_fetched", count=len(posts), pages=page - 1)
        return posts

    async def fetch_me(self) -> UserProfile:
        """Fetch the authenticated user and cache it in the session store."""
        data = await self._request("GET", "/api/users/me")
        data = data if isinstance(data, dict) else {}
        profile = UserProfile(
            id=_coerce_str(data.get("id")),
            username=_coerce_str(data.get("username")),
            address=_coerce_str(data.get("address")),
            hehe_score=_coerce_int(data.get("heheScore")),
        )
        self.session_store.set(
            SESSION_USER_KEY,
            {
                "id": profile.id,
                "username": profile.username,
                "address": profile.address,
                "heheScore": profile.hehe_score,
            },
        )
        return profile

    async def update_score(self, score_increase: int) -> int | None:
        """Add score_increase to the user's HEHE score.

        Returns:
            New cumulative score if the API reports it, None otherwise

        Raises:
            HeheApiAuthError: No token or token rejected
            HeheApiError: Request failed
        """
        data = await self._request(
            "POST", "/api/users/updateScore", json={"scoreIncrease": score_increase}
        )
        logger.info("hehe_api.score_updated", score_increase=score_increase)

        if isinstance(data, dict) and "heheScore" in data:
            return _coerce_int(data["heheScore"])
        return None

    async def fetch_rankings(self) -> list[RankedUser]:
        """Public leaderboard rows as returned by the API."""
        data = await self._request("GET", "/api/users/rankings", authenticated=False)
        return [
            RankedUser(
                id=_coerce_str(row.get("id")),
                username=_coerce_str(row.get("username")) or "Unknown",
                hehe_score=_coerce_int(row.get("heheScore")),
                avatar_url=row.get("avatarUrl"),
            )
            for row in (data if isinstance(data, list) else [])
            if isinstance(row, dict)
        ]
