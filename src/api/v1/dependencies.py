"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from fastapi import Depends

from core.config import settings
from domain.services.contracts import IFileStorage, IPasswordHasher
from domain.services.profile_form import ProfileForm
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.notifications.flash import FlashNotifier
from infrastructure.security.password_hasher import BcryptPasswordHasher
from infrastructure.storage.disks import get_disk


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_storage() -> IFileStorage:
    """Get the configured storage disk."""
    return get_disk(settings.storage_disk)


@lru_cache
def get_password_hasher() -> IPasswordHasher:
    """Get the password hasher."""
    return BcryptPasswordHasher()


def get_notifier() -> FlashNotifier:
    """Fresh flash notifier per request."""
    return FlashNotifier()


def get_profile_form(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
    storage: IFileStorage = Depends(get_storage),
    hasher: IPasswordHasher = Depends(get_password_hasher),
    notifier: FlashNotifier = Depends(get_notifier),
) -> ProfileForm:
    """Profile form wired to this request's flash notifier."""
    return ProfileForm(
        uow_factory,
        storage=storage,
        hasher=hasher,
        notifier=notifier,
        avatar_directory=settings.avatar_directory,
        avatar_max_kilobytes=settings.avatar_max_kilobytes,
    )
