from .user import User, UserRole
from .property import Property, MEALS
from .room import Room, RoomType, BEDS_PER_ROOM_TYPE
from .bed import Bed, BedStatus
from .tenant import Tenant, TenantStatus, TenantDocument, DocumentType, RESIDENT_STATUSES
from .billing import Bill, BillLineItem, BillStatus, BillItemType, Payment, PaymentMethod, PaymentStatus, ElectricityReading
from .deposit import SecurityDeposit, DepositStatus
from .maintenance import MaintenanceRequest, MaintenanceStatus, MaintenancePriority
from .content import Testimonial, Announcement
from .booking import Booking, BookingBed, BookingStatus
