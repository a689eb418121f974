"""
Repository Layer Package.

Provides data-access abstractions over Supabase (cloud) and SQLite (local cache).
All database operations flow through repositories; services never access
db.supabase or db.sqlite directly.

Usage:
    from uwezo.repositories.profile_repository import ProfileRepository
    from uwezo.repositories.task_repository import TaskRepository
"""

from uwezo.repositories.base_repository import BaseRepository
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.repositories.task_repository import TaskRepository
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.repositories.application_repository import ApplicationRepository
from uwezo.repositories.quiz_repository import QuizRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "TaskRepository",
    "CompanyRepository",
    "JobRepository",
    "ApplicationRepository",
    "QuizRepository",
]
