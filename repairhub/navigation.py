"""
Screen table for the app.

Each screen is a frozen dataclass; screens that show an issue carry its id.
``route`` / ``parse_route`` convert to and from the route strings the
screens are registered under.
"""

from __future__ import annotations

from dataclasses import dataclass

from repairhub.schemas import Role


class RouteError(ValueError):
    """Unknown route or missing route parameter."""


@dataclass(frozen=True)
class Screen:
    name = ""

    @property
    def route(self) -> str:
        return self.name


@dataclass(frozen=True)
class IssueScreen(Screen):
    issue_id: str

    def __post_init__(self):
        if not str(self.issue_id).strip():
            raise RouteError(f"{type(self).__name__} requires an issue id")

    @property
    def route(self) -> str:
        return f"{self.name}/{self.issue_id}"


@dataclass(frozen=True)
class Auth(Screen):
    name = "auth"


@dataclass(frozen=True)
class Login(Screen):
    name = "login"


@dataclass(frozen=True)
class Signup(Screen):
    name = "signup"


@dataclass(frozen=True)
class Home(Screen):
    name = "home"


@dataclass(frozen=True)
class ReportIssue(Screen):
    name = "report"


@dataclass(frozen=True)
class ViewDetail(IssueScreen):
    name = "viewdetail"


@dataclass(frozen=True)
class RepairHome(Screen):
    name = "repairhome"


@dataclass(frozen=True)
class RepairDetail(Screen):
    name = "repairDetail"


@dataclass(frozen=True)
class RepairViewDetail(IssueScreen):
    name = "repairviewdetail"


@dataclass(frozen=True)
class AssignedIssue(IssueScreen):
    name = "assignedissue"


SCREENS: dict[str, type[Screen]] = {
    cls.name: cls
    for cls in (
        Auth, Login, Signup, Home, ReportIssue, ViewDetail,
        RepairHome, RepairDetail, RepairViewDetail, AssignedIssue,
    )
}

START_SCREEN = Auth()


def parse_route(route: str) -> Screen:
    """Turn ``"viewdetail/42"`` into ``ViewDetail("42")``."""
    name, _, param = route.strip().strip("/").partition("/")
    cls = SCREENS.get(name)
    if cls is None:
        raise RouteError(f"Unknown route: {route!r}")
    if issubclass(cls, IssueScreen):
        if not param or "/" in param:
            raise RouteError(f"Route {route!r} needs exactly one issue id")
        return cls(param)
    if param:
        raise RouteError(f"Route {name!r} takes no parameters")
    return cls()


def home_for_role(role: str) -> Screen:
    """Landing screen after signup or login."""
    if role == Role.REPAIR_TEAM.value:
        return RepairHome()
    return Home()


class Navigator:
    """Back stack over ``Screen`` values."""

    def __init__(self, start: Screen = START_SCREEN) -> None:
        self._stack: list[Screen] = [start]

    @property
    def current(self) -> Screen:
        return self._stack[-1]

    @property
    def back_stack(self) -> list[Screen]:
        return list(self._stack)

    def navigate(self, screen: Screen, clear_back_stack: bool = False) -> Screen:
        if clear_back_stack:
            self._stack = [screen]
        elif screen != self.current:
            self._stack.append(screen)
        return screen

    def navigate_route(self, route: str, clear_back_stack: bool = False) -> Screen:
        return self.navigate(parse_route(route), clear_back_stack=clear_back_stack)

    def pop(self) -> bool:
        """Go back one screen; False when already at the root."""
        if len(self._stack) == 1:
            return False
        self._stack.pop()
        return True
