from .db import db
from .enums import (
    Role,
    ServiceCategory,
    BookingStatus,
    TimeSlot,
    PaymentStatus,
    PaymentMethod,
    ContactCategory,
    ContactStatus,
    ContactPriority,
)
from .user import User
from .service import Service
from .booking import Booking, BookingItem, BookingImage
from .contact import Contact
from .audit_log import AuditLog
