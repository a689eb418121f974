"""Application Host Shell.

The top-level ``CTk`` window that orchestrates the application
lifecycle: login → role resolution → role-gated views → logout.

All dependencies are injected via the constructor.  The shell contains
no business logic.  It delegates authentication to ``AuthService``, the
route policy to ``RoleResolver``, and view construction to the
``RouteRegistry``.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.config import AppConfig
from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.auth_models import AuthErrorCode, AuthResult, AuthSession
from uwezo.models.enums import AuthEvent, RoleStatus, UserRole
from uwezo.models.routing import RedirectAction
from uwezo.services import ServiceContainer
from uwezo.ui.login_view import LoginView
from uwezo.ui.route_registry import RouteRegistry
from uwezo.ui.sidebar import SidebarNav
from uwezo.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    LOGIN_WINDOW_HEIGHT,
    LOGIN_WINDOW_WIDTH,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    TEXT_SECONDARY,
)
from uwezo.ui.views.role_selection_view import RoleSelectionView

_SESSION_CHECK_INTERVAL_MS: int = 60_000  # 60 seconds


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Lifecycle
    ---------
    1. On boot: restores any live session, otherwise shows ``LoginView``.
    2. On sign-in: starts the role lookup on a worker thread and shows a
       placeholder while the resolver is ``checking``.
    3. Once the role is known: builds the sidebar for that role and
       renders the current route, applying the resolver's redirects.
    4. Logout: signs out, resets the resolver, returns to login.
    5. Periodic token refresh every 60 s via ``self.after()``.

    Parameters
    ----------
    config:
        Application configuration.
    db:
        Dual-database manager (Supabase + SQLite).
    session:
        Injectable session holder for the authenticated user.
    services:
        Fully-wired service container.
    registry:
        Route registry populated before shell launch.
    logger:
        Structured logger instance.
    initial_route:
        Route to open after sign-in (e.g. an ``/apply/{job_id}`` link).
    """

    def __init__(
        self,
        config: AppConfig,
        db: DatabaseManager,
        session: SessionManager,
        services: ServiceContainer,
        registry: RouteRegistry,
        logger: StructuredLogger,
        initial_route: Optional[str] = None,
    ) -> None:
        super().__init__()

        self._config = config
        self._db = db
        self._session = session
        self._services = services
        self._registry = registry
        self._logger = logger

        self._route: str = initial_route or routing.LANDING
        self._rendered_key: Optional[tuple[str, str]] = None
        self._view: Optional[ctk.CTkFrame] = None
        self._session_check_job: Optional[str] = None

        self._login_view: Optional[LoginView] = None
        self._sidebar: Optional[SidebarNav] = None
        self._sidebar_role: Optional[UserRole] = None
        self._content_container: Optional[ctk.CTkFrame] = None

        self.title("Uwezo Career")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")

        self.protocol("WM_DELETE_WINDOW", self._on_close)

        auth_service = self._services["auth_service"]
        self._unsubscribe_auth = auth_service.subscribe(self._on_auth_event)
        self._unsubscribe_role = self._services["role_resolver"].subscribe(
            self._on_role_event,
        )
        auth_service.start_listening()

        self._show_placeholder_window("Loading...")
        threading.Thread(
            target=self._restore_in_background, name="session-restore", daemon=True,
        ).start()

    # ==================================================================
    # Startup
    # ==================================================================

    def _restore_in_background(self) -> None:
        restored = self._services["auth_service"].restore_session()
        self.after(0, self._handle_restore_result, restored)

    def _handle_restore_result(self, restored: Optional[AuthSession]) -> None:
        self._clear_placeholder_window()
        if restored is None:
            self._show_login()
        else:
            self._logger.info("Restored session for %s", restored.user.id)
            self._enter_main_shell()

    # ==================================================================
    # View transitions
    # ==================================================================

    def _show_login(self) -> None:
        """Display the login view and size the window appropriately."""
        self._clear_main_shell()
        self.resizable(True, True)
        self.minsize(LOGIN_WINDOW_WIDTH, LOGIN_WINDOW_HEIGHT)

        if self._login_view is not None:
            return
        self._login_view = LoginView(
            parent=self,
            auth_service=self._services["auth_service"],
            on_login_success=self._handle_login_success,
            logger=self._logger,
        )
        self._login_view.pack(fill="both", expand=True)

    def _enter_main_shell(self) -> None:
        """Build the content area and kick off role resolution."""
        if self._login_view is not None:
            self._login_view.destroy()
            self._login_view = None
        if self._content_container is not None:
            return

        self.minsize(800, 500)
        self._content_container = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=0)
        self._content_container.pack(side="right", fill="both", expand=True)

        self._render()
        self._start_role_lookup()
        self._start_sync_worker()
        self._check_session()

    def _rebuild_sidebar(self) -> None:
        """(Re)create the sidebar for the resolved role, once known."""
        resolver = self._services["role_resolver"]
        role = resolver.role
        if self._sidebar is not None and self._sidebar_role == role:
            return
        if self._sidebar is not None:
            self._sidebar.destroy()
            self._sidebar = None
        self._sidebar_role = role
        if role is None or self._content_container is None:
            return

        self._sidebar = SidebarNav(
            parent=self,
            on_route_selected=self.navigate,
            on_logout=self._handle_logout,
            session=self._session,
            role_label=str(role).capitalize(),
            logger=self._logger,
        )
        self._sidebar.pack(side="left", fill="y", before=self._content_container)
        for entry in self._registry.sidebar_entries(str(role)):
            self._sidebar.add_route(entry.route, entry.display_name, entry.icon)
        self._sidebar.set_online(self._db.is_online)
        self._highlight_sidebar()

    def _clear_main_shell(self) -> None:
        """Destroy sidebar, content, and the current view."""
        self._destroy_view()
        if self._sidebar is not None:
            self._sidebar.destroy()
            self._sidebar = None
        self._sidebar_role = None
        if self._content_container is not None:
            self._content_container.destroy()
            self._content_container = None

    # ==================================================================
    # Routing
    # ==================================================================

    def navigate(self, route: str) -> None:
        """Go to *route*, honouring the resolver's redirect policy."""
        redirect = self._services["role_resolver"].navigate(route)
        if redirect is not None:
            self._logger.info(
                "Redirecting %s → %s (%s)", route, redirect.target, redirect.reason,
            )
            route = redirect.target
            self._services["role_resolver"].navigate(route)
        self._route = route
        self._render()

    def _apply_redirect(self, redirect: Optional[RedirectAction]) -> None:
        if redirect is None:
            self._render()
            return
        self._logger.info(
            "Redirecting %s → %s (%s)", self._route, redirect.target, redirect.reason,
        )
        self.navigate(redirect.target)

    def _view_kind(self, status: RoleStatus) -> str:
        if status == RoleStatus.CHECKING:
            return "checking"
        if self._route == routing.LANDING:
            return "role-selection" if status == RoleStatus.UNSELECTED else "redirecting"
        return "route"

    def _render(self) -> None:
        """Show the view for the current route and role state.

        A role change alone does not rebuild a registered view, so a view
        that grants a role (the apply screen) survives its own update.
        """
        if self._content_container is None:
            return
        kind = self._view_kind(self._services["role_resolver"].status)
        key = (self._route, kind)
        if key == self._rendered_key:
            return

        self._destroy_view()
        self._rendered_key = key

        if kind == "checking":
            self._view = self._placeholder("Checking your account...")
        elif kind == "role-selection":
            self._view = RoleSelectionView(
                parent=self._content_container,
                role_selection=self._services["role_selection_service"],
                user_id=self._session.user_id or "",
                config=self._config,
                logger=self._logger,
            )
        elif kind == "redirecting":
            # Resolved on the landing route; the redirect is already queued.
            self._view = self._placeholder("Opening your dashboard...")
        else:
            entry = self._registry.match(self._route)
            if entry is None:
                self._logger.warning("No view registered for route %s", self._route)
                self._view = self._placeholder("This page could not be found.")
            else:
                self._view = entry.factory(
                    self._content_container, self._route, self.navigate,
                )

        self._view.pack(fill="both", expand=True)
        self._highlight_sidebar()
        self._logger.info("Showing route: %s", self._route)

    def _destroy_view(self) -> None:
        if self._view is not None:
            self._view.destroy()
            self._view = None
        self._rendered_key = None

    def _highlight_sidebar(self) -> None:
        if self._sidebar is None:
            return
        entry = self._registry.match(self._route)
        self._sidebar.set_active(entry.route if entry is not None else None)

    def _placeholder(self, message: str) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self._content_container, fg_color=CONTENT_BG)
        ctk.CTkLabel(
            frame, text=message, font=FONT_BODY, text_color=TEXT_SECONDARY,
        ).place(relx=0.5, rely=0.5, anchor="center")
        return frame

    def _show_placeholder_window(self, message: str) -> None:
        self._boot_label = ctk.CTkLabel(
            self, text=message, font=FONT_BODY, text_color=TEXT_SECONDARY,
        )
        self._boot_label.place(relx=0.5, rely=0.5, anchor="center")

    def _clear_placeholder_window(self) -> None:
        self._boot_label.destroy()

    # ==================================================================
    # Role lifecycle
    # ==================================================================

    def _start_role_lookup(self) -> None:
        user_id = self._session.user_id
        if user_id is None:
            return
        resolver = self._services["role_resolver"]
        route = self._route

        def _lookup() -> None:
            redirect = resolver.refresh(user_id, route)
            self.after(0, self._apply_redirect, redirect)

        threading.Thread(target=_lookup, name="role-lookup", daemon=True).start()

    def _on_role_event(self, status: RoleStatus, role: Optional[UserRole]) -> None:
        """Resolver listener; may fire on any thread."""
        self.after(0, self._handle_role_changed)

    def _handle_role_changed(self) -> None:
        if self._content_container is None:
            return
        self._rebuild_sidebar()
        # Re-run the policy so role changes made inside a view redirect too.
        self.navigate(self._route)

    # ==================================================================
    # Auth lifecycle
    # ==================================================================

    def _handle_login_success(self) -> None:
        """Called by ``LoginView`` after successful authentication."""
        self._logger.info(
            "Login successful: %s", self._session.get_current_user().display_name,
        )
        self._enter_main_shell()

    def _on_auth_event(self, event: AuthEvent, current: Optional[AuthSession]) -> None:
        """AuthService listener; may fire on the client's own thread."""
        if event == AuthEvent.SIGNED_OUT:
            self.after(0, self._handle_signed_out)

    def _handle_signed_out(self) -> None:
        if self._content_container is None:
            return
        self._logger.info("Signed out; returning to login.")
        self._teardown_session()
        self._show_login()

    def _handle_logout(self) -> None:
        """Delegate logout to AuthService and return to login screen."""
        self._teardown_session()
        self._services["auth_service"].sign_out()
        self._show_login()

    def _teardown_session(self) -> None:
        self._stop_sync_worker()
        if self._session_check_job is not None:
            self.after_cancel(self._session_check_job)
            self._session_check_job = None
        self._services["role_resolver"].reset()
        self._route = routing.LANDING

    # ==================================================================
    # Session refresh
    # ==================================================================

    def _check_session(self) -> None:
        """Periodic check: refresh the access token via AuthService.

        The network call runs on a background thread; the result is
        handled back on the main thread via ``self.after()``.
        """
        if not self._session.is_authenticated:
            return

        auth_service = self._services["auth_service"]

        def _refresh_in_background() -> None:
            result = auth_service.refresh_session_token()
            self.after(0, self._handle_session_refresh_result, result)

        threading.Thread(
            target=_refresh_in_background, name="session-refresh", daemon=True,
        ).start()

    def _handle_session_refresh_result(self, result: AuthResult) -> None:
        """Process the token-refresh result on the main thread.

        Expired or revoked refresh tokens force a logout; transient
        network errors retry on the next cycle.
        """
        if self._sidebar is not None:
            self._sidebar.set_online(self._db.is_online)

        if not result.success and result.error_code == AuthErrorCode.SESSION_EXPIRED:
            self._logger.warning("Session expired. Forcing logout.")
            self._teardown_session()
            self._services["auth_service"].sign_out()
            self._show_login()
            self.after(100, self._show_session_expired_message)
            return

        if self._content_container is not None:
            self._session_check_job = self.after(
                _SESSION_CHECK_INTERVAL_MS, self._check_session,
            )

    def _show_session_expired_message(self) -> None:
        if self._login_view is not None:
            self._login_view.show_message(
                "Your session has expired. Please sign in again."
            )

    # ==================================================================
    # Sync worker lifecycle
    # ==================================================================

    def _start_sync_worker(self) -> None:
        self._services["sync_worker"].start()

    def _stop_sync_worker(self) -> None:
        worker = self._services["sync_worker"]
        worker.stop()
        waiting = worker.pending_count()
        if waiting:
            self._logger.info("%d writes still queued for sync.", waiting)

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Gracefully shut down background threads before destroying."""
        self._stop_sync_worker()
        self._services["auth_service"].stop_listening()
        self._unsubscribe_auth()
        self._unsubscribe_role()
        if self._session_check_job is not None:
            self.after_cancel(self._session_check_job)
            self._session_check_job = None
        self.destroy()
