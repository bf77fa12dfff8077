"""
Sequence Service Database Models

SQLAlchemy models for the sequence aggregate: one sequence row owning an
ordered collection of step rows.
"""

from sqlalchemy import (
    Uuid,
    String,
    Text,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional
import uuid

from ..constants import get_current_timestamp


class Base(DeclarativeBase):
    """Canonical Base class for all database models."""

    pass


class Sequence(Base):
    """Campaign definition owning its mail steps."""

    __tablename__ = "sequences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        unique=True,
        nullable=False,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    open_tracking_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    click_tracking_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=get_current_timestamp,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    steps: Mapped[list["Step"]] = relationship(
        "Step",
        back_populates="sequence",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Step.id",
    )

    def __repr__(self) -> str:
        return f"<Sequence(id={self.id}, external_id={self.external_id}, name={self.name})>"


class Step(Base):
    """One mail message of a sequence."""

    __tablename__ = "steps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        unique=True,
        nullable=False,
        default=uuid.uuid4,
    )
    sequence_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sequences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mail_subject: Mapped[str] = mapped_column(Text, nullable=False)
    mail_content: Mapped[str] = mapped_column(Text, nullable=False)
    step_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    sequence: Mapped["Sequence"] = relationship("Sequence", back_populates="steps")

    # Table constraints
    __table_args__ = (
        CheckConstraint(
            "step_number IS NULL OR step_number >= 1", name="check_step_number_positive"
        ),
    )

    def __repr__(self) -> str:
        return f"<Step(id={self.id}, external_id={self.external_id}, sequence_id={self.sequence_id})>"
