from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, ForeignKey, Numeric, DateTime, Date, Boolean, Integer, Text, JSON
from datetime import datetime, date
from typing import Optional

class Base(DeclarativeBase):
    pass

class Shipment(Base):
    __tablename__ = "shipments"
    id: Mapped[int] = mapped_column(primary_key=True)
    tracking_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    # Open string: canonical statuses, "cancelled", or anything staff typed in
    status: Mapped[str] = mapped_column(String(40), default="processing")
    origin_location: Mapped[str] = mapped_column(String(255))
    destination_location: Mapped[str] = mapped_column(String(255))
    current_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    estimated_delivery: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    # Sender
    sender_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    sender_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sender_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    sender_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Recipient
    recipient_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    recipient_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recipient_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    recipient_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Package
    package_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    weight_kg: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    package_value: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    service_type: Mapped[str] = mapped_column(String(30), default="standard")
    delivery_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    package_images: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    # Pricing
    shipping_fee: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    customs_hold: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    events: Mapped[list["ShipmentEvent"]] = relationship(
        "ShipmentEvent",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="ShipmentEvent.event_date",
    )

class ShipmentEvent(Base):
    __tablename__ = "shipment_events"
    id: Mapped[int] = mapped_column(primary_key=True)
    shipment_id: Mapped[int] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(255))
    event_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    # Set by staff; never derived from event_date
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="events")

class QuoteRequest(Base):
    __tablename__ = "quote_requests"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    service_type: Mapped[str] = mapped_column(String(30))
    origin: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    destination: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    weight_kg: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
