from .health import health_bp
from .auth import auth_bp
from .services import services_bp
from .bookings import bookings_bp
from .users import users_bp
from .contact import contact_bp
from .admin import admin_bp

ALL_BLUEPRINTS = (
    health_bp,
    auth_bp,
    services_bp,
    bookings_bp,
    users_bp,
    contact_bp,
    admin_bp,
)
