"""SQLModel implementation of the User repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import or_, select

from ...models.user import User
from ..database import SessionFactory


class SQLModelUserRepository:
    """SQLModel-based user repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.session_factory() as session:
            obj = session.get(User, user_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_email(self, email: str) -> Optional[User]:
        with self.session_factory() as session:
            obj = session.exec(select(User).where(User.email == email)).first()
            if obj:
                session.expunge(obj)
            return obj

    def find_conflicts(
        self, *, email: str | None, username: str | None, exclude_id: int | None = None
    ) -> list[User]:
        """Return users already holding ``email`` or ``username``."""

        clauses = []
        if email:
            clauses.append(User.email == email)
        if username:
            clauses.append(User.username == username)
        if not clauses:
            return []
        with self.session_factory() as session:
            statement = select(User).where(or_(*clauses))
            if exclude_id is not None:
                statement = statement.where(User.id != exclude_id)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, user: User) -> User:
        with self.session_factory() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    def update(self, user: User) -> User:
        with self.session_factory() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user
