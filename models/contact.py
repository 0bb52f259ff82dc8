from datetime import datetime
from models.db import db
from models.enums import ContactCategory, ContactPriority, ContactStatus


class Contact(db.Model):
    __tablename__ = "contacts"

    id = db.Column(db.Integer, primary_key=True)
    # set when the form is submitted by a signed-in user
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(10), nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)

    category = db.Column(db.String(40), nullable=False, default=ContactCategory.GENERAL.value)
    status = db.Column(db.String(20), nullable=False, default=ContactStatus.NEW.value, index=True)
    priority = db.Column(db.String(20), nullable=False, default=ContactPriority.MEDIUM.value)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    response_message = db.Column(db.Text, nullable=True)
    responded_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    responded_at = db.Column(db.DateTime, nullable=True)

    is_read = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    responded_by = db.relationship("User", foreign_keys=[responded_by_id])
