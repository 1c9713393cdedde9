"""User model.

Only the identity columns the records core reads are mapped here; password
hashes and tokens are owned by the authentication service.
"""

import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    """Application user referenced as record creator, approver or member."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, nullable=True)
    avatar = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def summary(self) -> dict:
        """Public identity fields embedded in record responses."""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "avatar": self.avatar,
        }
