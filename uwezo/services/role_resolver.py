"""
Role Resolver.

Tri-state machine deciding which part of the app a signed-in user may
see::

    checking ──lookup──▶ resolved(role)
        │
        └──────────────▶ unselected

``refresh`` reads ``{role, role_selected}`` from ``user_profiles`` and
returns the ``RedirectAction`` (if any) the routing layer should apply.
The resolver never navigates by itself.

Redirect policy:
    - resolved on the landing route: go to the role's dashboard
      (employer → employer dashboard, anything else → employee).
    - unselected under a role-gated subtree (employer, employee,
      profile): go back to the landing route, which hosts role selection.

Only one lookup runs per session at a time; overlapping ``refresh``
calls return immediately.  ``reset`` starts a new session generation and
any lookup still running for the old one is discarded on completion.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.enums import RoleStatus, UserRole
from uwezo.models.routing import RedirectAction
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.base_service import BaseService

RoleListener = Callable[[RoleStatus, Optional[UserRole]], None]


class RoleResolver(BaseService):
    """Resolves the current user's role and derives route redirects.

    Parameters
    ----------
    repo:
        Profile repository used for the ``{role, role_selected}`` lookup.
    logger:
        Structured logger instance.
    """

    def __init__(self, repo: ProfileRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo = repo
        self._lock: threading.Lock = threading.Lock()
        self._status: RoleStatus = RoleStatus.CHECKING
        self._role: Optional[UserRole] = None
        self._route: str = routing.LANDING
        self._in_flight: bool = False
        self._generation: int = 0
        self._listeners: list[RoleListener] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> RoleStatus:
        with self._lock:
            return self._status

    @property
    def role(self) -> Optional[UserRole]:
        with self._lock:
            return self._role

    @property
    def role_selected(self) -> bool:
        return self.status == RoleStatus.RESOLVED

    @property
    def is_checking(self) -> bool:
        return self.status == RoleStatus.CHECKING

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def subscribe(self, listener: RoleListener) -> Callable[[], None]:
        """Call *listener* with ``(status, role)`` after every state change."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def refresh(self, user_id: str, route: str) -> Optional[RedirectAction]:
        """Look up the persisted role for *user_id* while the UI shows *route*.

        Blocking; call from a worker thread.  Returns ``None`` when another
        lookup is already in flight, when the result belongs to a session
        that has since been reset, when the state did not change, or when
        the policy requires no redirect.
        """
        with self._lock:
            if self._in_flight:
                self._logger.debug("Role check already in progress; skipping.")
                return None
            self._in_flight = True
            self._route = route
            generation = self._generation

        try:
            try:
                profile = self._repo.fetch_role_selection(user_id)
            except Exception as exc:
                self._logger.error(
                    "Error fetching role for %s: %s", user_id, exc,
                    extra={"event": "ROLE_LOOKUP_FAILED", "user_id": user_id},
                )
                self._apply(generation, RoleStatus.UNSELECTED, None)
                return None

            if profile is not None and profile.role_selected and profile.role is not None:
                self._logger.info("Role found for %s: %s", user_id, profile.role)
                return self._apply(generation, RoleStatus.RESOLVED, profile.role)

            self._logger.info("Role not selected for %s", user_id)
            return self._apply(generation, RoleStatus.UNSELECTED, None)
        finally:
            with self._lock:
                if generation == self._generation:
                    self._in_flight = False

    def set_role(self, role: UserRole) -> Optional[RedirectAction]:
        """Manual override after an explicit role selection.  No network call."""
        with self._lock:
            generation = self._generation
        self._logger.info("Role set manually: %s", role)
        return self._apply(generation, RoleStatus.RESOLVED, role)

    def navigate(self, route: str) -> Optional[RedirectAction]:
        """Record a route change and return the redirect the policy requires."""
        with self._lock:
            self._route = route
            status, role = self._status, self._role
        return self._redirect_for(status, role, route)

    def reset(self) -> None:
        """Forget the current user (sign-out).  Pending lookups become stale."""
        with self._lock:
            self._generation += 1
            self._in_flight = False
            changed = self._status != RoleStatus.CHECKING or self._role is not None
            self._status = RoleStatus.CHECKING
            self._role = None
            self._route = routing.LANDING
            listeners = list(self._listeners)
        if changed:
            self._notify(listeners, RoleStatus.CHECKING, None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(
        self,
        generation: int,
        status: RoleStatus,
        role: Optional[UserRole],
    ) -> Optional[RedirectAction]:
        with self._lock:
            if generation != self._generation:
                self._logger.debug("Discarding role result from a previous session.")
                return None
            if (status, role) == (self._status, self._role):
                return None
            self._status = status
            self._role = role
            route = self._route
            listeners = list(self._listeners)

        self._notify(listeners, status, role)
        return self._redirect_for(status, role, route)

    def _notify(
        self,
        listeners: list[RoleListener],
        status: RoleStatus,
        role: Optional[UserRole],
    ) -> None:
        for listener in listeners:
            try:
                listener(status, role)
            except Exception as exc:
                self._logger.error("Role listener failed: %s", exc, exc_info=True)

    @staticmethod
    def _redirect_for(
        status: RoleStatus,
        role: Optional[UserRole],
        route: str,
    ) -> Optional[RedirectAction]:
        if status == RoleStatus.RESOLVED and route == routing.LANDING:
            return RedirectAction(
                target=routing.dashboard_for(role), reason="role resolved",
            )
        if status == RoleStatus.UNSELECTED and routing.is_role_gated(route):
            return RedirectAction(target=routing.LANDING, reason="role not selected")
        return None
