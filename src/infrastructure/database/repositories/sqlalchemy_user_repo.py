"""SQLAlchemy implementation of User repository."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.user import User
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def email_taken(self, email: str, ignore_id: UUID | None = None) -> bool:
        """Check whether a user other than ``ignore_id`` owns this email."""
        stmt = (
            select(func.count())
            .select_from(UserModel)
            .where(func.lower(UserModel.email) == email.strip().lower())
        )
        if ignore_id is not None:
            stmt = stmt.where(UserModel.id != ignore_id)
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = self._to_model(user)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        """Update an existing user."""
        model = await self._get_model(user.id)
        if not model:
            raise ValueError(f"User {user.id} not found")

        model.name = user.name
        model.email = user.email
        model.password = user.password
        model.avatar = user.avatar

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_avatar(self, id: UUID, avatar: str | None) -> User:
        """Update only the avatar column."""
        model = await self._get_model(id)
        if not model:
            raise ValueError(f"User {id} not found")

        model.avatar = avatar

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def _get_model(self, id: UUID) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            password=model.password,
            avatar=model.avatar,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            password=entity.password,
            avatar=entity.avatar,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
