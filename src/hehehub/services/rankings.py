"""Leaderboard ordering and pagination.

The top three users form the podium (they share the prize pool); everyone
else is listed in pages of USERS_PER_PAGE.
"""

import math
from dataclasses import dataclass

from hehehub.services.hehe_api import RankedUser

PODIUM_SIZE = 3
USERS_PER_PAGE = 10


@dataclass(frozen=True)
class RankingsPage:
    """One page of the leaderboard."""

    podium: list[RankedUser]
    entries: list[RankedUser]
    page: int
    total_pages: int


def sort_rankings(users: list[RankedUser]) -> list[RankedUser]:
    """Highest HEHE score first, ties broken by username."""
    return sorted(users, key=lambda user: (-user.hehe_score, user.username))


def paginate_rankings(
    users: list[RankedUser],
    page: int = 1,
    per_page: int = USERS_PER_PAGE,
) -> RankingsPage:
    """Split a leaderboard into the podium and the requested page.

    Pages outside 1..total_pages are clamped.
    """
    ranked = sort_rankings(users)
    total_pages = max(1, math.ceil((len(ranked) - PODIUM_SIZE) / per_page))
    page = min(max(page, 1), total_pages)

    start = PODIUM_SIZE + (page - 1) * per_page
    return RankingsPage(
        podium=ranked[:PODIUM_SIZE],
        entries=ranked[start : start + per_page],
        page=page,
        total_pages=total_pages,
    )
