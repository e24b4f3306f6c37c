from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from datetime import datetime
from database import Base


class Role(PyEnum):
    """Resolved once per user; every permission check goes through it."""
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"
    SUBCONTRACTOR = "SUBCONTRACTOR"


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(Role), nullable=False, default=Role.CLIENT)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Contracts issued by this user (admins only)
    issued_contracts = relationship("Contract", back_populates="admin")

    # Relationship with notifications
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan"
    )
