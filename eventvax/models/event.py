# eventvax/models/event.py
from sqlalchemy import BigInteger, Column, Integer, String, DateTime, Text, func
from sqlalchemy.orm import relationship

from eventvax.db.base_class import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_name = Column(String, nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False)
    event_end_date = Column(DateTime(timezone=True), nullable=True)
    venue = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    flyer_image = Column(String, nullable=True)
    ipfs_metadata_hash = Column(String, nullable=True)
    content_hash = Column(String, nullable=True)
    creator_address = Column(String, nullable=True, index=True)
    ticket_contract_address = Column(String, nullable=True)
    blockchain_tx_hash = Column(String, nullable=True)
    # One mirrored row per on-chain event
    blockchain_event_id = Column(BigInteger, nullable=True, unique=True)
    # Block the registration was mined in; the next pass resumes from it
    block_number = Column(BigInteger, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    tickets = relationship("Ticket", back_populates="event")
