"""SQLAlchemy models for the withdrawal workflow database."""

from typing import Optional
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class User(Base):
    """Workflow user model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    role = Column(String, nullable=False)
    can_create_requests = Column(Boolean, default=False, nullable=False)
    can_approve_reject = Column(Boolean, default=False, nullable=False)
    can_disburse = Column(Boolean, default=False, nullable=False)
    view_only_access = Column(Boolean, default=False, nullable=False)


class WithdrawalRequest(Base):
    """Withdrawal request model."""

    __tablename__ = "withdrawal_requests"

    id = Column(String, primary_key=True)
    project_number = Column(String, nullable=False)
    ref_number = Column(String, nullable=False, index=True)
    beneficiary_name = Column(String, nullable=False)
    country = Column(String, nullable=False)
    amount = Column(Numeric(16, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    value_date = Column(Date, nullable=False)
    current_stage = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False)
    priority = Column(String, nullable=False)
    assigned_to = Column(String, nullable=False)
    processing_days = Column(Integer, default=0, nullable=False)
    notes = Column(String, nullable=True)
    attachments = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, default=1, nullable=False)

    # Relationships
    events = relationship("TimelineEvent", back_populates="request")
    comments = relationship("RequestComment", back_populates="request")


class TimelineEvent(Base):
    """Timeline event model.

    ``seq`` preserves append order for events sharing a timestamp.
    """

    __tablename__ = "timeline_events"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, nullable=False)
    request_id = Column(String, ForeignKey("withdrawal_requests.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    event_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    previous_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    request = relationship("WithdrawalRequest", back_populates="events")


class RequestComment(Base):
    """Request comment model."""

    __tablename__ = "request_comments"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, nullable=False)
    request_id = Column(String, ForeignKey("withdrawal_requests.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    comment_text = Column(String, nullable=False)
    mentioned_users = Column(JSON, default=list, nullable=False)
    is_internal = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    request = relationship("WithdrawalRequest", back_populates="comments")


def create_session_factory(database_url: str, timeout: Optional[float] = None) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    For SQLite, ``timeout`` bounds how long a connection waits on a locked
    database file.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if timeout is not None:
            connect_args["timeout"] = timeout
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
