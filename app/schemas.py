from datetime import date
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator

from .models import RoomType, BedStatus, MaintenancePriority, PaymentMethod, BillItemType, DocumentType

# ==== Inventory ====

class PropertyIn(BaseModel):
    name: str = Field(min_length=2)
    address: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    pincode: str = Field(pattern=r"^\d{6}$")
    description: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    rules: List[str] = Field(default_factory=list)
    phone: Optional[str] = None
    email: Optional[str] = None
    google_maps_link: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    website: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    whatsapp: Optional[str] = None
    breakfast_enabled: bool = False
    breakfast_price: Optional[float] = Field(default=None, ge=0)
    breakfast_menu: Optional[str] = None
    lunch_enabled: bool = False
    lunch_price: Optional[float] = Field(default=None, ge=0)
    lunch_menu: Optional[str] = None
    dinner_enabled: bool = False
    dinner_price: Optional[float] = Field(default=None, ge=0)
    dinner_menu: Optional[str] = None

    @field_validator("google_maps_link", "website", "facebook", "instagram")
    @classmethod
    def _url(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Enter a valid URL")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        if not v:
            return None
        if "@" not in v:
            raise ValueError("Enter a valid email address")
        return v

class RoomIn(BaseModel):
    property_id: int
    room_number: str = Field(min_length=1)
    floor: int = Field(default=0, ge=0)
    room_type: RoomType
    has_ac: bool = False
    has_attached_bath: bool = False
    has_balcony: bool = False
    monthly_rent: Optional[float] = Field(default=None, ge=0)
    security_deposit: float = Field(default=0, ge=0)
    daily_price: Optional[float] = Field(default=None, ge=0)
    multi_bed_pricing: Optional[Dict[str, float]] = None
    description: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)

class BedIn(BaseModel):
    room_id: int
    bed_number: str = Field(min_length=1)
    status: BedStatus = BedStatus.AVAILABLE
    description: Optional[str] = None

# ==== Tenants ====

class TenantIn(BaseModel):
    bed_id: int
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    emergency_name: Optional[str] = None
    emergency_phone: Optional[str] = None
    emergency_relation: Optional[str] = None
    occupation: Optional[str] = None
    workplace_college: Optional[str] = None
    work_address: Optional[str] = None
    check_in_date: Optional[date] = None
    expected_checkout: Optional[date] = None
    notice_period_days: int = Field(default=30, ge=0)
    notes: Optional[str] = None

class TenantUpdateIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    emergency_name: Optional[str] = None
    emergency_phone: Optional[str] = None
    emergency_relation: Optional[str] = None
    occupation: Optional[str] = None
    workplace_college: Optional[str] = None
    work_address: Optional[str] = None
    expected_checkout: Optional[date] = None
    notice_period_days: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

class DocumentIn(BaseModel):
    document_type: DocumentType
    document_number: str = Field(min_length=1)
    file_url: str
    file_name: str

# ==== Billing ====

class LineItemIn(BaseModel):
    item_type: BillItemType
    description: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)

class PaymentIn(BaseModel):
    amount: float = Field(gt=0)
    payment_method: PaymentMethod
    transaction_date: Optional[date] = None
    reference: Optional[str] = None
    notes: Optional[str] = None

class Deduction(BaseModel):
    reason: str = Field(min_length=1)
    amount: float = Field(ge=0)

# ==== Public booking ====

class BookingRequestIn(BaseModel):
    bed_ids: List[int]
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    email: Optional[str] = None
    requested_checkin: date
    duration_months: Optional[int] = Field(default=None, ge=1)
    duration_days: Optional[int] = Field(default=None, ge=1)
    expected_checkout: Optional[date] = None
    ac_selected: bool = False
    breakfast_selected: bool = False
    lunch_selected: bool = False
    dinner_selected: bool = False
    advance_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

# ==== Content ====

class TestimonialIn(BaseModel):
    property_id: int
    name: str = Field(min_length=2)
    photo: Optional[str] = None
    testimonial: str = Field(min_length=10)
    rating: int = Field(ge=1, le=5)
    is_active: bool = True

class AnnouncementIn(BaseModel):
    property_id: Optional[int] = None
    title: str = Field(min_length=2)
    content: str = Field(min_length=2)
    is_active: bool = True

class MaintenanceRequestIn(BaseModel):
    room_id: int
    category: str = Field(min_length=2)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    description: str = Field(min_length=5)
    images: List[str] = Field(default_factory=list)

# ==== Jobs ====

class PaymentReminder(BaseModel):
    tenant: str
    phone: str
    email: Optional[str] = None
    bill_id: int
    billing_month: date
    due_date: date
    balance: float
    days_until_due: int
