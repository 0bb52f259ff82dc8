from datetime import datetime
from models.db import db


class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(40), nullable=False, index=True)

    price_per_kg = db.Column(db.Float, nullable=False)
    minimum_quantity = db.Column(db.Float, nullable=False, default=1)
    maximum_quantity = db.Column(db.Float, nullable=False, default=1000)

    image = db.Column(db.String(255), nullable=True)
    features = db.Column(db.JSON, nullable=False, default=list)
    processing_time = db.Column(db.String(60), nullable=False, default="24-48 hours")
    available_areas = db.Column(db.JSON, nullable=False, default=list)

    # soft delete flag
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("maximum_quantity > minimum_quantity", name="ck_services_quantity_bounds"),
    )
