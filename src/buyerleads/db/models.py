"""
SQLAlchemy ORM Models

Users, buyer leads and the append-only buyer change history.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    String, BigInteger, DateTime, Text, JSON,
    ForeignKey, CheckConstraint, Index, Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.buyerleads.db.base import (
    Base, TimestampMixin, UUIDPrimaryKeyMixin, new_id, utc_now
)
from src.buyerleads.models.enums import (
    BHK, BuyerField, City, HistoryAction, PropertyType, Purpose, Source,
    Status, Timeline, UserRole,
)

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _enum_column(enum_type, name: str) -> SQLEnum:
    return SQLEnum(
        enum_type,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Application user.

    Users own buyer leads and author history entries. Identities are
    provided by the external auth provider; rows are created on first use.
    """
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email (unique)"
    )
    full_name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Display name"
    )
    role: Mapped[UserRole] = mapped_column(
        _enum_column(UserRole, "user_role"),
        nullable=False,
        default=UserRole.USER,
        comment="USER or ADMIN"
    )

    buyers: Mapped[List["Buyer"]] = relationship("Buyer", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Buyer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Buyer lead.

    One prospective buyer or tenant. Enum columns are stored as their
    canonical codes; tags are a JSON array.
    """
    __tablename__ = "buyers"

    # Contact
    full_name: Mapped[str] = mapped_column(
        String(80),
        nullable=False,
        comment="Full name (2-80 chars)"
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Optional contact email"
    )
    phone: Mapped[str] = mapped_column(
        String(15),
        nullable=False,
        comment="Phone number, digits only (10-15)"
    )

    # Classification
    city: Mapped[City] = mapped_column(_enum_column(City, "city"), nullable=False)
    property_type: Mapped[PropertyType] = mapped_column(
        _enum_column(PropertyType, "property_type"),
        nullable=False
    )
    bhk: Mapped[Optional[BHK]] = mapped_column(
        _enum_column(BHK, "bhk"),
        nullable=True,
        comment="Required for apartments and villas"
    )
    purpose: Mapped[Purpose] = mapped_column(_enum_column(Purpose, "purpose"), nullable=False)

    # Commercial
    budget_min: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    budget_max: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # Process
    timeline: Mapped[Timeline] = mapped_column(_enum_column(Timeline, "timeline"), nullable=False)
    source: Mapped[Source] = mapped_column(_enum_column(Source, "source"), nullable=False)
    status: Mapped[Status] = mapped_column(
        _enum_column(Status, "status"),
        nullable=False,
        default=Status.NEW
    )

    # Free-form
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[List[str]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
        comment="Ordered tag list"
    )

    # Ownership
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        comment="User who created the lead"
    )
    owner: Mapped["User"] = relationship("User", back_populates="buyers")

    __table_args__ = (
        CheckConstraint("budget_min IS NULL OR budget_min > 0", name="check_budget_min_positive"),
        CheckConstraint("budget_max IS NULL OR budget_max > 0", name="check_budget_max_positive"),
        CheckConstraint(
            "budget_min IS NULL OR budget_max IS NULL OR budget_max >= budget_min",
            name="check_budget_range"
        ),
        Index("idx_buyers_city", "city"),
        Index("idx_buyers_property_type", "property_type"),
        Index("idx_buyers_status", "status"),
        Index("idx_buyers_timeline", "timeline"),
        Index("idx_buyers_owner_id", "owner_id"),
        Index("idx_buyers_updated_at", "updated_at"),
    )

    def snapshot(self) -> Dict[str, Any]:
        """Current editable field values keyed by field name."""
        return {field.value: getattr(self, field.value) for field in BuyerField}

    def __repr__(self) -> str:
        return f"<Buyer(id={self.id}, name={self.full_name}, status={self.status})>"


class BuyerHistory(Base):
    """
    Append-only audit entry for one buyer mutation.

    ``buyer_id`` carries no foreign key; entries remain after the buyer
    is deleted.
    """
    __tablename__ = "buyer_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    buyer_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="Buyer the entry describes"
    )
    changed_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        comment="Acting user"
    )
    action: Mapped[HistoryAction] = mapped_column(
        _enum_column(HistoryAction, "history_action"),
        nullable=False
    )
    diff: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Field changes ({field: {from, to}}) or full field set"
    )
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now
    )

    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("idx_buyer_history_buyer_id", "buyer_id"),
        Index("idx_buyer_history_changed_at", "changed_at"),
    )

    def __repr__(self) -> str:
        return f"<BuyerHistory(buyer_id={self.buyer_id}, action={self.action}, at={self.changed_at})>"
