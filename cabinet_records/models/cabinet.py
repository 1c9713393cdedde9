"""Cabinet and CabinetMember models."""

import uuid

from sqlalchemy import Column, Index, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


# Membership role granting approver-level rights on records.
MEMBER_FULL_ROLE = "member_full"


class Cabinet(Base):
    """Container that defines the custom-field schema for its records.

    custom_fields is an ordered list of field definitions:
        {"id": 1, "name": "Invoice No", "type": "Text Only",
         "isMandatory": true, "characterLimit": 20}
    Field identity is the id, not the name.

    approvers is a list of {"userId": "..."} entries.
    """

    __tablename__ = "cabinets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    custom_fields = Column(JSON, nullable=False, default=list)
    approvers = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", foreign_keys=[created_by_id])
    members = relationship("CabinetMember", back_populates="cabinet", cascade="all, delete-orphan")

    def approver_ids(self) -> set[str]:
        return {a.get("userId") for a in (self.approvers or []) if isinstance(a, dict)}

    def summary(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


class CabinetMember(Base):
    """Membership of a user in a cabinet.

    Roles:
        member_full: may approve, reject and delete records like an approver
        member:      may create and view records
    """

    __tablename__ = "cabinet_members"
    __table_args__ = (
        Index("ix_cabinet_members_user_id", "user_id"),
    )

    cabinet_id = Column(String(36), ForeignKey("cabinets.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(30), nullable=False, default="member")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cabinet = relationship("Cabinet", back_populates="members")
