from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Text, Boolean, Numeric, Float, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

MEALS = ("breakfast", "lunch", "dinner")

class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    pincode: Mapped[str] = mapped_column(String(10), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    amenities: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    rules: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Contact and map links shown on the public site
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))
    google_maps_link: Mapped[str | None] = mapped_column(String(500))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    website: Mapped[str | None] = mapped_column(String(500))
    facebook: Mapped[str | None] = mapped_column(String(500))
    instagram: Mapped[str | None] = mapped_column(String(500))
    whatsapp: Mapped[str | None] = mapped_column(String(20))

    # Meal configuration
    breakfast_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    breakfast_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    breakfast_menu: Mapped[str | None] = mapped_column(Text)
    lunch_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    lunch_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    lunch_menu: Mapped[str | None] = mapped_column(Text)
    dinner_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dinner_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    dinner_menu: Mapped[str | None] = mapped_column(Text)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    rooms: Mapped[list["Room"]] = relationship(back_populates="property", cascade="all, delete-orphan")
    testimonials: Mapped[list["Testimonial"]] = relationship(back_populates="property", cascade="all, delete-orphan")
    announcements: Mapped[list["Announcement"]] = relationship(back_populates="property", cascade="all, delete-orphan")

    def meal_enabled(self, meal: str) -> bool:
        return bool(getattr(self, f"{meal}_enabled"))

    @property
    def map_link(self) -> str | None:
        if self.google_maps_link:
            return self.google_maps_link
        if self.latitude is not None and self.longitude is not None:
            return f"https://www.google.com/maps?q={self.latitude},{self.longitude}"
        return None
