"""Profile form component.

Holds the editing state for the signed-in user's own profile and runs the
mount / update / delete-avatar / submit hooks against the persistence,
storage, hashing and notification collaborators.
"""

from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any
from uuid import UUID

import structlog
from starlette.concurrency import run_in_threadpool

from core.exceptions import UnknownFieldError, UserNotFoundError
from domain.entities.upload import StagedUpload
from domain.entities.user import User
from domain.entities.view import (
    FieldNode,
    FieldsetNode,
    LayoutNode,
    TabNode,
    TabsNode,
    ViewHandle,
    ViewNode,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.contracts import IFileStorage, INotifier, IPasswordHasher
from domain.services.validation import (
    Confirmed,
    Email,
    Image,
    Max,
    MaxKilobytes,
    Min,
    Nullable,
    Required,
    RequiredWith,
    RuleSet,
    Same,
    String,
    Unique,
    is_empty,
    validate,
)

logger = structlog.get_logger()

FORM_FIELDS = ("user.name", "user.email", "avatar", "password", "password_confirmation")
TWO_COLUMN_GRID = "grid grid-cols-1 lg:grid-cols-2 gap-6"


def profile_layout(avatar_url: str | None = None, staged_avatar: str | None = None) -> tuple[ViewNode, ...]:
    """Build the profile form layout."""
    return (
        TabsNode(
            label="Profile",
            tabs=(
                TabNode(
                    label="Account",
                    children=(
                        LayoutNode(
                            css_class=TWO_COLUMN_GRID,
                            children=(
                                FieldNode(
                                    name="user.name",
                                    label="Name",
                                    attributes={"required": "true"},
                                ),
                                FieldNode(
                                    name="user.email",
                                    label="E-Mail Address",
                                    input_type="email",
                                    binding="lazy",
                                    attributes={"required": "true", "autocomplete": "email"},
                                ),
                            ),
                        ),
                        FieldNode(
                            name="avatar",
                            label="User Photo",
                            input_type="avatar",
                            extra={
                                "avatar_url": avatar_url,
                                "staged_filename": staged_avatar,
                                "delete_action": "delete_avatar",
                            },
                        ),
                        FieldsetNode(
                            label="Update Password",
                            css_class=TWO_COLUMN_GRID,
                            children=(
                                FieldNode(
                                    name="password",
                                    label="Password",
                                    input_type="password",
                                    attributes={"autocomplete": "new-password"},
                                    hint="Optional",
                                    help="Leave blank to keep current password.",
                                ),
                                FieldNode(
                                    name="password_confirmation",
                                    label="Confirm New Password",
                                    input_type="password",
                                    attributes={"autocomplete": "new-password"},
                                    hint="Optional",
                                ),
                            ),
                        ),
                    ),
                ),
            ),
        ),
    )


class ProfileForm:
    """Edits name, email, avatar and password of one user."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        storage: IFileStorage,
        hasher: IPasswordHasher,
        notifier: INotifier,
        avatar_directory: str = "avatars",
        avatar_max_kilobytes: int = 1024,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage = storage
        self._hasher = hasher
        self._notifier = notifier
        self._avatar_directory = avatar_directory
        self._avatar_max_kilobytes = avatar_max_kilobytes

        self.user: User | None = None
        self.avatar: StagedUpload | None = None
        self.password: str | None = None
        self.password_confirmation: str | None = None

        self._updated_hooks: dict[str, Callable[[], Awaitable[None]]] = {
            "avatar": self._updated_avatar,
            "user.email": self._updated_user_email,
        }

    # --- Lifecycle hooks ---

    async def mount(self, user_id: UUID) -> None:
        """Load the user being edited into form state."""
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        self.user = user

    def set(self, field: str, value: Any) -> None:
        """Assign a form field without running its update hook."""
        user = self._require_user()
        if field == "user.name":
            user.name = value
        elif field == "user.email":
            user.email = value.strip() if isinstance(value, str) else value
        elif field == "avatar":
            self.avatar = value
        elif field == "password":
            self.password = value
        elif field == "password_confirmation":
            self.password_confirmation = value
        else:
            raise UnknownFieldError(field)

    async def update(self, field: str, value: Any) -> None:
        """Assign a form field, then run the field's update hook if it has one."""
        self.set(field, value)
        hook = self._updated_hooks.get(field)
        if hook:
            await hook()

    async def _updated_avatar(self) -> None:
        rules = self._rules()
        await validate(self._data(), {"avatar": rules["avatar"]})

    async def _updated_user_email(self) -> None:
        async with self._uow_factory() as uow:
            await validate(
                self._data(),
                {"user.email": [Unique(self._email_taken(uow))]},
            )

    # --- Actions ---

    async def delete_avatar(self) -> None:
        """Remove the stored avatar, if the user has one."""
        user = self._require_user()
        path = user.avatar
        if not path:
            return

        await run_in_threadpool(self._storage.delete, path)
        self.avatar = None

        async with self._uow_factory() as uow:
            saved = await uow.users.update_avatar(user.id, None)
            await uow.commit()

        user.avatar = None
        logger.info("avatar_deleted", user_id=str(user.id), path=path)
        self._notifier.notify(f"Avatar removed for {saved.name}")

    async def submit(self) -> None:
        """Validate the whole form and persist it."""
        user = self._require_user()

        async with self._uow_factory() as uow:
            await validate(self._data(), self._rules(uow))

            changes: dict[str, Any] = {}
            if self.avatar:
                changes["avatar"] = await run_in_threadpool(
                    self._storage.put, self._avatar_directory, self.avatar
                )
                logger.info("avatar_stored", user_id=str(user.id), path=changes["avatar"])
            # Whitespace-only passwords count as blank and keep the current hash
            if not is_empty(self.password):
                changes["password"] = await run_in_threadpool(self._hasher.hash, self.password)

            try:
                saved = await uow.users.update(replace(user, **changes))
                await uow.commit()
            except Exception:
                if "avatar" in changes:
                    logger.warning(
                        "avatar_rollback",
                        user_id=str(user.id),
                        path=changes["avatar"],
                    )
                    await run_in_threadpool(self._storage.delete, changes["avatar"])
                raise

        self.user = saved
        self.avatar = None
        self.password = None
        self.password_confirmation = None

        logger.info(
            "profile_saved",
            user_id=str(saved.id),
            avatar_changed="avatar" in changes,
            password_changed="password" in changes,
        )
        self._notifier.notify("Profile saved!")

    # --- View ---

    def fields(self) -> tuple[ViewNode, ...]:
        return profile_layout(
            avatar_url=self.avatar_url,
            staged_avatar=self.avatar.filename if self.avatar else None,
        )

    def render(self) -> ViewHandle:
        return ViewHandle(
            template="profile",
            layout="layouts.app",
            title="Profile",
            fields=self.fields(),
            data=self.state(),
        )

    @property
    def avatar_url(self) -> str | None:
        if self.user and self.user.avatar:
            return self._storage.url(self.user.avatar)
        return None

    def state(self) -> dict[str, Any]:
        """Serialisable snapshot of the form state. Passwords are never echoed."""
        user = self._require_user()
        return {
            "user": {
                "id": str(user.id),
                "name": user.name,
                "email": user.email,
                "avatar": user.avatar,
                "avatar_url": self.avatar_url,
            },
            "avatar": self.avatar.filename if self.avatar else None,
            "password_set": not is_empty(self.password),
        }

    # --- Internals ---

    def _require_user(self) -> User:
        if self.user is None:
            raise RuntimeError("ProfileForm not mounted. Call mount() first.")
        return self.user

    def _data(self) -> dict[str, Any]:
        user = self._require_user()
        return {
            "user.name": user.name,
            "user.email": user.email,
            "avatar": self.avatar,
            "password": self.password,
            "password_confirmation": self.password_confirmation,
        }

    def _email_taken(self, uow: IUnitOfWork) -> Callable[[Any], Awaitable[bool]]:
        user_id = self._require_user().id

        async def taken(email: Any) -> bool:
            return await uow.users.email_taken(str(email), ignore_id=user_id)

        return taken

    def _rules(self, uow: IUnitOfWork | None = None) -> RuleSet:
        email_rules = [Required(), String(), Email(), Max(255)]
        if uow is not None:
            email_rules.append(Unique(self._email_taken(uow)))
        return {
            "user.name": [Required(), String(), Min(2), Max(255)],
            "user.email": email_rules,
            "avatar": [Nullable(), Image(), MaxKilobytes(self._avatar_max_kilobytes)],
            "password": [
                Nullable(),
                String(),
                RequiredWith("password_confirmation"),
                Min(6),
                Confirmed(),
            ],
            "password_confirmation": [Nullable(), String(), Same("password")],
        }
