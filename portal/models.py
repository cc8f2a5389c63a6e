"""Core SQLAlchemy models (2.x style) for the purchase portal schema."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Product(Base):
    """Product catalogue; each product lists the subtypes manufacturers can offer."""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    subtypes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    specifications: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)


class Manufacturer(Base):
    """Manufacturers with the product types they offer and their prices."""
    __tablename__ = "manufacturers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    contact: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="")
    contact_person_name: Mapped[str] = mapped_column(String(160), default="")
    contact_person_phone: Mapped[str] = mapped_column(String(20), default="")
    contact_person_email: Mapped[str] = mapped_column(String(255), default="")
    contact_person_designation: Mapped[str] = mapped_column(String(160), default="")
    gst_number: Mapped[str] = mapped_column(String(20), default="")
    website: Mapped[str] = mapped_column(String(255), default="")
    # [{"product_type": str, "price": float}, ...]
    products_offered: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)


class Order(Base):
    """Purchase orders placed with manufacturers."""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    manufacturer: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    product: Mapped[str] = mapped_column(String(160), nullable=False)
    product_type: Mapped[str] = mapped_column(String(160), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    from_location: Mapped[str] = mapped_column(String(255), nullable=False)
    to_location: Mapped[str] = mapped_column(String(255), nullable=False)
    transport_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    product_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_orders_created_at", "created_at"),
    )
