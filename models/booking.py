from datetime import datetime
from models.db import db
from models.enums import BookingStatus, PaymentMethod, PaymentStatus


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    pickup_address = db.Column(db.JSON, nullable=False)
    pickup_date = db.Column(db.Date, nullable=False, index=True)
    pickup_time_slot = db.Column(db.String(30), nullable=False)
    contact_phone = db.Column(db.String(10), nullable=False)
    alternate_phone = db.Column(db.String(10), nullable=True)
    special_instructions = db.Column(db.String(500), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    # status values: see models.enums.BookingStatus

    total_estimated_price = db.Column(db.Float, nullable=False, default=0)
    actual_weight = db.Column(db.Float, nullable=True)
    actual_price = db.Column(db.Float, nullable=True)

    payment_status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = db.Column(db.String(20), nullable=False, default=PaymentMethod.CASH.value)

    feedback_rating = db.Column(db.Integer, nullable=True)
    feedback_comment = db.Column(db.String(500), nullable=True)
    feedback_submitted_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship("User", foreign_keys=[user_id])
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    items = db.relationship(
        "BookingItem",
        backref="booking",
        order_by="BookingItem.position",
        cascade="all, delete-orphan",
        lazy=True,
    )
    images = db.relationship(
        "BookingImage",
        backref="booking",
        order_by="BookingImage.id",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def has_feedback(self) -> bool:
        return self.feedback_rating is not None


class BookingItem(db.Model):
    __tablename__ = "booking_items"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    quantity = db.Column(db.Float, nullable=False)
    estimated_price = db.Column(db.Float, nullable=False)

    service = db.relationship("Service")


class BookingImage(db.Model):
    __tablename__ = "booking_images"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)
    url = db.Column(db.String(255), nullable=False)
    description = db.Column(db.String(255), nullable=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
