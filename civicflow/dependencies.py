"""FastAPI dependency providers. Services live on app.state, built once per app."""

from typing import Optional

from fastapi import Depends, HTTPException, Request

from civicflow.core.settings import Settings
from civicflow.models.user import Profile, UserRole
from civicflow.services.account_service import AccountService
from civicflow.services.auth_provider import AuthProvider
from civicflow.services.blob_store import BlobStore
from civicflow.services.profile_cache import ProfileCache
from civicflow.services.report_store import ReportStore
from civicflow.services.reporting_service import ReportingService
from civicflow.services.visibility import VisibilityFilter


class Services:
    """Explicit wiring of one application's stores and services."""

    def __init__(self, blob_store: BlobStore, auth_provider: AuthProvider, config: Settings):
        self.blob_store = blob_store
        self.reports = ReportStore(blob_store)
        self.profiles = ProfileCache(blob_store, seed_examples=config.SEED_EXAMPLE_PROFILES)
        self.visibility = VisibilityFilter(self.reports)
        self.reporting = ReportingService(self.reports, self.profiles)
        self.accounts = AccountService(
            self.profiles,
            auth_provider,
            min_password_length=config.MIN_PASSWORD_LENGTH,
        )

    def load(self) -> None:
        self.reports.load()
        self.profiles.load()


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_report_store(services: Services = Depends(get_services)) -> ReportStore:
    return services.reports


def get_visibility(services: Services = Depends(get_services)) -> VisibilityFilter:
    return services.visibility


def get_reporting(services: Services = Depends(get_services)) -> ReportingService:
    return services.reporting


def get_accounts(services: Services = Depends(get_services)) -> AccountService:
    return services.accounts


def get_current_profile(services: Services = Depends(get_services)) -> Optional[Profile]:
    return services.profiles.current()


def require_role(*allowed_roles: UserRole):
    """Factory: returns a dependency that requires an active profile with one of the roles."""
    def _check(profile: Optional[Profile] = Depends(get_current_profile)) -> Profile:
        if profile is None:
            raise HTTPException(status_code=401, detail="Not signed in")
        if profile.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return profile
    return _check
