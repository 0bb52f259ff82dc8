from flask import Blueprint, request, jsonify

from domain.errors import NotFound
from domain.services import validate_service_fields
from models import db
from models.service import Service
from security.rbac import admin_required
from utils.audit import log_event
from utils.ids import get_by_id
from utils.pagination import filter_value, paginate
from utils.serializers import service_json
from utils.uploads import save_image

services_bp = Blueprint("services", __name__, url_prefix="/api/services")

SORT_OPTIONS = {
    "name_asc": Service.name.asc(),
    "name_desc": Service.name.desc(),
    "price_asc": Service.price_per_kg.asc(),
    "price_desc": Service.price_per_kg.desc(),
}


def _payload():
    # admin forms post multipart when a service_image is attached
    return request.get_json(silent=True) or request.form.to_dict()


def _get_service_or_404(service_id: int) -> Service:
    service = get_by_id(Service, service_id)
    if service is None:
        raise NotFound("Service not found")
    return service


@services_bp.get("")
def list_services():
    q = Service.query.filter(Service.is_active.is_(True))

    category = filter_value("category")
    if category:
        q = q.filter(Service.category == category)

    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(db.or_(Service.name.ilike(like), Service.description.ilike(like)))

    order = SORT_OPTIONS.get(request.args.get("sort"), Service.created_at.desc())
    rows, pagination = paginate(q.order_by(order, Service.id.desc()))
    return jsonify(services=[service_json(s) for s in rows], pagination=pagination), 200


@services_bp.get("/categories")
def list_categories():
    rows = (
        db.session.query(Service.category)
        .filter(Service.is_active.is_(True))
        .distinct()
        .order_by(Service.category.asc())
        .all()
    )
    return jsonify(categories=[r[0] for r in rows]), 200


@services_bp.get("/<int:service_id>")
def get_service(service_id: int):
    service = _get_service_or_404(service_id)
    if not service.is_active:
        return jsonify(message="Service is no longer available"), 404
    return jsonify(service=service_json(service)), 200


@services_bp.post("")
@admin_required
def create_service():
    fields = validate_service_fields(_payload())

    image = request.files.get("service_image")
    if image is not None and image.filename:
        fields["image"] = save_image(image, "services", prefix="service")

    service = Service(**fields)
    db.session.add(service)
    db.session.commit()

    log_event("SERVICE_CREATE", entity="service", entity_id=service.id)
    return jsonify(message="Service created successfully", service=service_json(service)), 201


@services_bp.put("/<int:service_id>")
@admin_required
def update_service(service_id: int):
    service = _get_service_or_404(service_id)
    fields = validate_service_fields(_payload(), existing=service)

    image = request.files.get("service_image")
    if image is not None and image.filename:
        fields["image"] = save_image(image, "services", prefix="service")

    for name, value in fields.items():
        setattr(service, name, value)
    db.session.commit()

    log_event("SERVICE_UPDATE", entity="service", entity_id=service.id, details={"fields": sorted(fields)})
    return jsonify(message="Service updated successfully", service=service_json(service)), 200


@services_bp.delete("/<int:service_id>")
@admin_required
def delete_service(service_id: int):
    service = _get_service_or_404(service_id)
    service.is_active = False
    db.session.commit()

    log_event("SERVICE_DEACTIVATE", entity="service", entity_id=service.id)
    return jsonify(message="Service deactivated successfully"), 200
