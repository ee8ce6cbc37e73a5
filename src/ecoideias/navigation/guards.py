"""Frontend route table and access guards.

The single-page app asks where a path should lead for the current session:
render it, show the loading spinner, redirect, or show the not-found page.

Guards:
- ProtectedRoute: needs a signed-in user; anonymous visitors go to the login
  page ("/") carrying the attempted path
- AdminRoute: administrators only; others go to "/dashboard"
- UserRoute: regular users only; administrators go to "/admin"

Guards run in order and the first non-render decision wins.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Callable
from dataclasses import dataclass, field


class RouteAction(str, enum.Enum):
    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class SessionState:
    """What the frontend knows about the session at navigation time."""

    loading: bool = False
    user_id: str | None = None
    is_admin: bool = False


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    location: str | None = None
    route: str | None = None
    params: dict[str, str] = field(default_factory=dict)
    state: dict[str, str] = field(default_factory=dict)


Guard = Callable[[SessionState, str], "RouteDecision | None"]

LOGIN_PATH = "/"
USER_HOME = "/dashboard"
ADMIN_HOME = "/admin"


# ---------------------------------------------------------------------------
# Guards: return None to let the next guard (or the page) run
# ---------------------------------------------------------------------------


def protected_route(session: SessionState, path: str) -> RouteDecision | None:
    if session.loading:
        return RouteDecision(RouteAction.LOADING)
    if session.user_id is None:
        return RouteDecision(RouteAction.REDIRECT, location=LOGIN_PATH, state={"from": path})
    return None


def admin_route(session: SessionState, path: str) -> RouteDecision | None:
    decision = protected_route(session, path)
    if decision is not None:
        return decision
    if not session.is_admin:
        return RouteDecision(RouteAction.REDIRECT, location=USER_HOME)
    return None


def user_route(session: SessionState, path: str) -> RouteDecision | None:
    decision = protected_route(session, path)
    if decision is not None:
        return decision
    if session.is_admin:
        return RouteDecision(RouteAction.REDIRECT, location=ADMIN_HOME)
    return None


# ---------------------------------------------------------------------------
# Route table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Route:
    pattern: str
    guards: tuple[Guard, ...] = ()

    @property
    def regex(self) -> re.Pattern[str]:
        parts = []
        for segment in self.pattern.strip("/").split("/"):
            if segment.startswith(":"):
                parts.append(f"(?P<{segment[1:]}>[^/]+)")
            elif segment:
                parts.append(re.escape(segment))
        return re.compile("^/" + "/".join(parts) + "$")


_USER_PAGE = (protected_route, user_route)
_ADMIN_PAGE = (protected_route, admin_route)

ROUTES: tuple[Route, ...] = (
    Route("/"),
    Route("/forgot-password"),
    Route("/reset-password"),
    Route("/dashboard", _USER_PAGE),
    Route("/new-idea", _USER_PAGE),
    Route("/admin", _ADMIN_PAGE),
    Route("/admin/ideas", _ADMIN_PAGE),
    Route("/admin/ideas/:ideaId/evaluate", _ADMIN_PAGE),
    Route("/admin/users", _ADMIN_PAGE),
    Route("/admin/users/new", _ADMIN_PAGE),
    Route("/admin/users/:userId/edit", _ADMIN_PAGE),
    Route("/admin/goals", _ADMIN_PAGE),
    Route("/admin/ranking", _ADMIN_PAGE),
    Route("/admin/reports", _ADMIN_PAGE),
    Route("/admin/settings", _ADMIN_PAGE),
)


def normalize_path(path: str) -> str:
    """Drop query string, fragment and trailing slashes."""
    path = path.split("?", 1)[0].split("#", 1)[0].strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/") or "/"


def match_route(path: str) -> tuple[Route, dict[str, str]] | None:
    path = normalize_path(path)
    for route in ROUTES:
        m = route.regex.match(path)
        if m:
            return route, m.groupdict()
    return None


def resolve_route(path: str, session: SessionState) -> RouteDecision:
    """Decide what navigating to ``path`` does for ``session``."""
    path = normalize_path(path)
    matched = match_route(path)
    if matched is None:
        return RouteDecision(RouteAction.NOT_FOUND)

    route, params = matched
    for guard in route.guards:
        decision = guard(session, path)
        if decision is not None:
            return RouteDecision(
                decision.action,
                location=decision.location,
                route=route.pattern,
                params=params,
                state=decision.state,
            )
    return RouteDecision(RouteAction.RENDER, location=path, route=route.pattern, params=params)
