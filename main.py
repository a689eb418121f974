"""
Uwezo Career Desktop Application Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the local SQLite schema, registers the routed views, and launches the
CustomTkinter GUI.  Every subsystem is wired here; no module-level
globals.

Usage::

    python main.py                 # opens on the landing route
    python main.py /apply/<job_id> # opens an application link after sign-in
"""

from __future__ import annotations

import atexit
import sys
import traceback
from pathlib import Path
from typing import Optional

from uwezo.auth import SessionManager
from uwezo.config import get_config
from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger, get_logger
from uwezo.models import routing
from uwezo.models.enums import TaskType
from uwezo.schema import initialize_schema
from uwezo.services import create_services
from uwezo.ui.app_shell import AppShell
from uwezo.ui.route_registry import RouteRegistry
from uwezo.ui.views.agreement_view import AgreementView
from uwezo.ui.views.apply_view import ApplyView
from uwezo.ui.views.employee_dashboard_view import EmployeeDashboardView
from uwezo.ui.views.employer_dashboard_view import EmployerDashboardView
from uwezo.ui.views.job_form_view import JobFormView
from uwezo.ui.views.onboarding_view import OnboardingView
from uwezo.ui.views.profile_view import ProfileView
from uwezo.ui.views.quiz_view import QuizView

_EMPLOYER = frozenset({"employer"})
_SEEKERS = frozenset({"employee", "independent"})


def _initial_route(argv: list[str]) -> Optional[str]:
    """Accept an ``/apply/{job_id}`` route (or a full application URL)."""
    if len(argv) < 2:
        return None
    arg = argv[1]
    marker = arg.find(routing.APPLY + "/")
    if marker == -1:
        return None
    return arg[marker:]


def main() -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting Uwezo Career...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Database Manager (Supabase when reachable, SQLite always)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=Path(config.LOCAL_DB_PATH),
        logger=StructuredLogger(name="database"),
    )

    # close() is idempotent; this covers exits that skip the finally below.
    atexit.register(db.close)

    # ------------------------------------------------------------------
    # 3. SQLite Schema Initialization (idempotent)
    # ------------------------------------------------------------------
    initialize_schema(db.sqlite, StructuredLogger(name="schema"))

    # ------------------------------------------------------------------
    # 4. Session Manager + Service Container
    # ------------------------------------------------------------------
    session = SessionManager()
    services = create_services(db=db, config=config, session=session)

    # ------------------------------------------------------------------
    # 5. Route Registry
    # ------------------------------------------------------------------
    registry = RouteRegistry(logger=get_logger("routes"))

    registry.register(
        routing.EMPLOYER_DASHBOARD,
        display_name="Dashboard",
        icon="\U0001F4CA",  # Bar chart
        factory=lambda parent, route, navigate: EmployerDashboardView(
            parent=parent,
            dashboard=services["dashboard_service"],
            session=session,
            navigate=navigate,
            logger=get_logger("employer_dashboard"),
        ),
        required_roles=_EMPLOYER,
    )
    registry.register(
        routing.EMPLOYER_CREATE_JOB,
        display_name="Post a Job",
        icon="✚",  # Heavy plus
        factory=lambda parent, route, navigate: JobFormView(
            parent=parent,
            job_posting=services["job_posting_service"],
            session=session,
            navigate=navigate,
            logger=get_logger("job_form"),
        ),
        required_roles=_EMPLOYER,
    )
    registry.register(
        routing.EMPLOYEE_DASHBOARD,
        display_name="Dashboard",
        icon="\U0001F4CA",
        factory=lambda parent, route, navigate: EmployeeDashboardView(
            parent=parent,
            dashboard=services["dashboard_service"],
            session=session,
            navigate=navigate,
            logger=get_logger("employee_dashboard"),
        ),
        required_roles=_SEEKERS,
    )
    registry.register(
        routing.ONBOARDING,
        display_name="Onboarding",
        icon="✅",  # Check mark
        factory=lambda parent, route, navigate: OnboardingView(
            parent=parent,
            tracker=services["task_tracker"],
            session=session,
            navigate=navigate,
            logger=get_logger("onboarding"),
        ),
        required_roles=_SEEKERS,
    )
    registry.register(
        routing.QUIZ,
        display_name="Aptitude Quiz",
        icon="✎",  # Pencil
        factory=lambda parent, route, navigate: QuizView(
            parent=parent,
            quiz_service=services["quiz_service"],
            session=session,
            navigate=navigate,
            logger=get_logger("quiz"),
        ),
        in_sidebar=False,
    )
    for route, task_type, title in (
        (routing.NDA, TaskType.NDA, "Non-Disclosure Agreement"),
        (routing.CONTRACT, TaskType.CONTRACT, "Contract"),
    ):
        registry.register(
            route,
            display_name=title,
            icon="✍",  # Writing hand
            factory=lambda parent, route, navigate, task_type=task_type: AgreementView(
                parent=parent,
                signing=services["signing_service"],
                session=session,
                navigate=navigate,
                logger=get_logger("agreements"),
                task_type=task_type,
            ),
            in_sidebar=False,
        )
    registry.register(
        routing.PROFILE,
        display_name="Profile",
        icon="\U0001F464",  # Bust
        factory=lambda parent, route, navigate: ProfileView(
            parent=parent,
            profiles=services["profile_provisioning_service"],
            job_posting=services["job_posting_service"],
            session=session,
            logger=get_logger("profile"),
        ),
    )
    registry.register(
        routing.APPLY,
        display_name="Apply",
        icon="✉",  # Envelope
        factory=lambda parent, route, navigate: ApplyView(
            parent=parent,
            applications=services["application_service"],
            session=session,
            route=route,
            navigate=navigate,
            logger=get_logger("apply"),
        ),
        in_sidebar=False,
    )

    # ------------------------------------------------------------------
    # 6. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app = AppShell(
        config=config,
        db=db,
        session=session,
        services=services,
        registry=registry,
        logger=get_logger("ui"),
        initial_route=_initial_route(sys.argv),
    )
    try:
        app.mainloop()
    finally:
        db.close()
        logger.info("Uwezo Career shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so double-click users get feedback.

    Uses ``tkinter.messagebox`` (stdlib) rather than CustomTkinter so
    the dialog works even when CTk initialisation itself failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="Uwezo Career: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: stderr is all that is left.
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
