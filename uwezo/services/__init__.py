"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``SessionManager`` for user context.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the UI layer can consume without knowing the
internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from uwezo.auth import SessionManager
from uwezo.config import AppConfig
from uwezo.database import DatabaseManager
from uwezo.logger import get_logger
from uwezo.repositories.application_repository import ApplicationRepository
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.repositories.quiz_repository import QuizRepository
from uwezo.repositories.task_repository import TaskRepository
from uwezo.services.applications import ApplicationService
from uwezo.services.auth_service import AuthService
from uwezo.services.dashboard import DashboardService
from uwezo.services.job_posting import JobPostingService
from uwezo.services.local_cache import LocalCacheService
from uwezo.services.profile_provisioning import ProfileProvisioningService
from uwezo.services.quiz_service import QuizService
from uwezo.services.role_resolver import RoleResolver
from uwezo.services.role_selection import RoleSelectionService
from uwezo.services.signing import AgreementSigningService
from uwezo.services.sync_worker import SyncWorkerService
from uwezo.services.task_tracker import OnboardingTaskTracker


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Session & role ---
    auth_service: AuthService
    profile_provisioning_service: ProfileProvisioningService
    role_resolver: RoleResolver
    role_selection_service: RoleSelectionService

    # --- Onboarding ---
    task_tracker: OnboardingTaskTracker
    quiz_service: QuizService
    signing_service: AgreementSigningService

    # --- Jobs ---
    dashboard_service: DashboardService
    job_posting_service: JobPostingService
    application_service: ApplicationService

    # --- Infrastructure ---
    local_cache_service: LocalCacheService
    sync_worker: SyncWorkerService


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    session: SessionManager,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to the UI shell.

    Args:
        db: Initialised DatabaseManager with Supabase + SQLite ready.
        config: Application configuration (injected into services that need it).
        session: Shared holder for the signed-in session.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    profile_repo = ProfileRepository(db=db, logger=logger)
    task_repo = TaskRepository(db=db, logger=logger)
    company_repo = CompanyRepository(db=db, logger=logger)
    job_repo = JobRepository(db=db, logger=logger)
    application_repo = ApplicationRepository(db=db, logger=logger)
    quiz_repo = QuizRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services (no service dependencies)
    # ------------------------------------------------------------------
    local_cache_service = LocalCacheService(db=db, logger=logger)
    profile_provisioning_service = ProfileProvisioningService(
        repo=profile_repo,
        logger=logger,
    )
    role_resolver = RoleResolver(repo=profile_repo, logger=logger)
    task_tracker = OnboardingTaskTracker(
        cache=local_cache_service,
        repo=task_repo,
        logger=logger,
        freshness_window_s=config.TASK_CACHE_TTL_S,
    )
    dashboard_service = DashboardService(
        jobs=job_repo,
        applications=application_repo,
        config=config,
        logger=logger,
    )
    job_posting_service = JobPostingService(
        jobs=job_repo,
        companies=company_repo,
        config=config,
        logger=logger,
    )
    sync_worker = SyncWorkerService(db=db, config=config, logger=logger)

    auth_service = AuthService(
        db=db,
        session=session,
        provisioning=profile_provisioning_service,
        config=config,
        logger=logger,
    )

    # ------------------------------------------------------------------
    # 3. Orchestration services (depend on other services)
    # ------------------------------------------------------------------
    role_selection_service = RoleSelectionService(
        profiles=profile_repo,
        companies=company_repo,
        resolver=role_resolver,
        logger=logger,
    )
    application_service = ApplicationService(
        jobs=job_repo,
        applications=application_repo,
        profiles=profile_repo,
        resolver=role_resolver,
        logger=logger,
    )
    quiz_service = QuizService(
        repo=quiz_repo,
        tracker=task_tracker,
        logger=logger,
    )
    signing_service = AgreementSigningService(tracker=task_tracker, logger=logger)

    return ServiceContainer(
        auth_service=auth_service,
        profile_provisioning_service=profile_provisioning_service,
        role_resolver=role_resolver,
        role_selection_service=role_selection_service,
        task_tracker=task_tracker,
        quiz_service=quiz_service,
        signing_service=signing_service,
        dashboard_service=dashboard_service,
        job_posting_service=job_posting_service,
        application_service=application_service,
        local_cache_service=local_cache_service,
        sync_worker=sync_worker,
    )
