# eventvax/models/ticket.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, false, func
from sqlalchemy.orm import relationship

from eventvax.db.base_class import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    wallet_address = Column(String, nullable=False)
    tier_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    qr_code = Column(Text, nullable=True)
    transaction_hash = Column(String, nullable=True)
    verified = Column(Boolean, nullable=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    event = relationship("Event", back_populates="tickets")
