from models import db
from models.enums import ServiceCategory
from models.service import Service

DEFAULT_SERVICES = [
    {
        "name": "Newspaper & Cardboard Pickup",
        "description": "Doorstep collection of old newspapers, magazines and cardboard boxes.",
        "category": ServiceCategory.PAPER.value,
        "price_per_kg": 12,
        "minimum_quantity": 5,
        "maximum_quantity": 500,
        "features": ["Free pickup", "Instant payment"],
    },
    {
        "name": "Plastic Recycling",
        "description": "Bottles, containers and packaging plastics sorted for recycling.",
        "category": ServiceCategory.PLASTIC.value,
        "price_per_kg": 8,
        "minimum_quantity": 2,
        "maximum_quantity": 300,
        "features": ["Segregation at source"],
    },
    {
        "name": "Scrap Metal Collection",
        "description": "Iron, steel, aluminium and copper scrap.",
        "category": ServiceCategory.METAL.value,
        "price_per_kg": 25,
        "minimum_quantity": 5,
        "maximum_quantity": 1000,
        "features": ["Weighing on site"],
    },
    {
        "name": "E-Waste Disposal",
        "description": "Safe disposal of phones, laptops, cables and small appliances.",
        "category": ServiceCategory.ELECTRONIC.value,
        "price_per_kg": 15,
        "minimum_quantity": 1,
        "maximum_quantity": 200,
        "features": ["Certified recycler", "Data-safe handling"],
        "processing_time": "3-5 days",
    },
]


def seed_services() -> int:
    """Insert the default catalog when the services table is empty."""
    if Service.query.first() is not None:
        return 0
    for row in DEFAULT_SERVICES:
        db.session.add(Service(**row))
    db.session.commit()
    return len(DEFAULT_SERVICES)
