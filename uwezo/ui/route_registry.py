"""Route Registry.

Central registry mapping routes to view factories.  The Host Shell
queries this registry to populate the sidebar for the resolved role and
to build the view for the current route.

Adding a new screen = one ``register()`` call + one view class.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from uwezo.logger import StructuredLogger
from uwezo.models import routing

Navigate = Callable[[str], None]
ViewFactory = Callable[[ctk.CTkFrame, str, Navigate], ctk.CTkFrame]

ALL_ROLES: frozenset[str] = frozenset({"employer", "employee", "independent"})


class RouteEntry:
    """Metadata for a single registered route.

    Attributes
    ----------
    route:
        Route prefix handled by this entry (e.g. ``'/protected/employer'``).
    display_name:
        Human-readable name shown in the sidebar.
    icon:
        Unicode character used as the sidebar icon.
    factory:
        Callable ``(parent, route, navigate) -> CTkFrame`` invoked each
        time the route is shown.
    required_roles:
        Role values whose sidebar lists this route.
    in_sidebar:
        ``False`` for routes reached only from inside another view.
    """

    __slots__ = (
        "route",
        "display_name",
        "icon",
        "factory",
        "required_roles",
        "in_sidebar",
    )

    def __init__(
        self,
        route: str,
        display_name: str,
        icon: str,
        factory: ViewFactory,
        required_roles: frozenset[str],
        in_sidebar: bool,
    ) -> None:
        self.route = route
        self.display_name = display_name
        self.icon = icon
        self.factory = factory
        self.required_roles = required_roles
        self.in_sidebar = in_sidebar


class RouteRegistry:
    """Manages the collection of registered routes.

    Parameters
    ----------
    logger:
        Structured logger for registration events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger

    def register(
        self,
        route: str,
        display_name: str,
        icon: str,
        factory: ViewFactory,
        required_roles: frozenset[str] = ALL_ROLES,
        *,
        in_sidebar: bool = True,
    ) -> None:
        """Register a view for *route* and everything nested beneath it."""
        if route in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", route)
        self._entries[route] = RouteEntry(
            route=route,
            display_name=display_name,
            icon=icon,
            factory=factory,
            required_roles=required_roles,
            in_sidebar=in_sidebar,
        )
        self._logger.info("Route registered: %s (%s)", route, display_name)

    def match(self, route: str) -> Optional[RouteEntry]:
        """The entry with the longest prefix covering *route*."""
        candidates = [
            entry for entry in self._entries.values()
            if routing.is_under(route, entry.route)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda entry: len(entry.route))

    def sidebar_entries(self, role: Optional[str]) -> list[RouteEntry]:
        """Sidebar routes visible to *role*, preserving registration order."""
        if role is None:
            return []
        return [
            entry for entry in self._entries.values()
            if entry.in_sidebar and role in entry.required_roles
        ]
