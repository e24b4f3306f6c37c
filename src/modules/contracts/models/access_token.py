from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from database import Base


class GuestAccessToken(Base):
    __tablename__ = 'guest_access_tokens'

    id = Column(Integer, primary_key=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    contract_id = Column(String(36), ForeignKey('contracts.id'), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    consumed = Column(Boolean, nullable=False, default=False)
    consumed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    contract = relationship("Contract", back_populates="access_token")

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
