"""ORM model for user accounts (auth and RBAC)."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, LargeBinary, String, func

from app.models.base import Base


class User(Base):
    """
    Account for JWT authentication and role-based access control.

    role: 'User' or 'Admin'. username and email are each unique; the unique
    indexes are what actually guarantee it under concurrent registrations.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('User', 'Admin')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(LargeBinary(60), nullable=False)
    role = Column(String(20), nullable=False, default="User", server_default="User")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
