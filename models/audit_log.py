from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.Integer, nullable=True, index=True)  # nullable for anonymous contact submissions
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. BOOKING_CREATE, USER_ROLE_UPDATE
    entity = db.Column(db.String(40), nullable=True)   # e.g. booking, service, contact
    entity_id = db.Column(db.String(40), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    details = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
