import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Enum, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from database import Base


class ContractStatus(PyEnum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    SIGNED = "SIGNED"
    # Never stored: derived at read time from SENT + an expired access token.
    EXPIRED = "EXPIRED"


def new_contract_id() -> str:
    return str(uuid.uuid4())


class Contract(Base):
    __tablename__ = 'contracts'

    id = Column(String(36), primary_key=True, default=new_contract_id)

    admin_id = Column(Integer, ForeignKey('users.id'), nullable=True)
    admin = relationship("User", back_populates="issued_contracts")

    template_id = Column(Integer, ForeignKey('contract_templates.id'), nullable=True)
    template = relationship("ContractTemplate")

    project_name = Column(String(255), nullable=False)
    project_description = Column(Text, default="")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_terms = Column(Text, default="")
    scope_of_work = Column(Text, default="")

    # Frozen at send time, template edits afterwards do not touch it
    contract_content = Column(Text, nullable=False)

    guest_name = Column(String(255), nullable=True)
    guest_email = Column(String(255), nullable=True)

    status = Column(Enum(ContractStatus), nullable=False, default=ContractStatus.DRAFT)

    admin_signature = Column(Text, nullable=True)
    admin_signed_at = Column(DateTime, nullable=True)

    guest_signature = Column(Text, nullable=True)
    guest_signed_at = Column(DateTime, nullable=True)
    signed_name = Column(String(255), nullable=True)
    signed_email = Column(String(255), nullable=True)

    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    access_token = relationship(
        "GuestAccessToken",
        back_populates="contract",
        uselist=False,
        cascade="all, delete-orphan"
    )

    def status_at(self, now: datetime) -> ContractStatus:
        """Stored status, with SENT reported as EXPIRED once the link has lapsed."""
        if (
            self.status == ContractStatus.SENT
            and self.access_token is not None
            and now >= self.access_token.expires_at
        ):
            return ContractStatus.EXPIRED
        return self.status
