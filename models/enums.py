import enum


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class ServiceCategory(str, enum.Enum):
    PAPER = "Paper & Cardboard"
    PLASTIC = "Plastic"
    METAL = "Metal"
    GLASS = "Glass"
    ELECTRONIC = "Electronic Waste"
    ORGANIC = "Organic Waste"
    TEXTILE = "Textile"
    MIXED = "Mixed Waste"
    BULK = "Bulk Pickup"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PICKED_UP = "picked_up"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TimeSlot(str, enum.Enum):
    MORNING = "9:00 AM - 12:00 PM"
    AFTERNOON = "12:00 PM - 3:00 PM"
    EVENING = "3:00 PM - 6:00 PM"
    NIGHT = "6:00 PM - 9:00 PM"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"


class ContactCategory(str, enum.Enum):
    GENERAL = "General Inquiry"
    SERVICE_REQUEST = "Service Request"
    COMPLAINT = "Complaint"
    FEEDBACK = "Feedback"
    PARTNERSHIP = "Partnership"
    TECHNICAL = "Technical Support"
    OTHER = "Other"


class ContactStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ContactPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def values(enum_cls) -> list:
    return [member.value for member in enum_cls]


def parse(enum_cls, raw):
    """Return the member for ``raw`` or None when it is not a valid value."""
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        return None
