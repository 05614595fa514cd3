"""ORM model for blog accounts (credentials, verification and reset state, RBAC)."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, false, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class User(Base):
    """
    Account for JWT authentication and role-based access control.

    role: 'admin' or 'user'
    verification_token is set at registration and cleared by the one successful verification.
    reset_token and reset_token_expires are both set or both null.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user", server_default="user")
    is_verified = Column(Boolean, nullable=False, default=False, server_default=false())
    verification_token = Column(String(128), nullable=True, index=True)
    reset_token = Column(String(128), nullable=True, index=True)
    reset_token_expires = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")
