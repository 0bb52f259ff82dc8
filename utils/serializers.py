def _iso(value):
    return value.isoformat() if value else None


def user_summary(u):
    if u is None:
        return None
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "email": u.email,
        "phone": u.phone,
    }


def user_json(u):
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "email": u.email,
        "phone": u.phone,
        "role": u.role,
        "address": u.address,
        "profile_image": u.profile_image,
        "is_active": u.is_active,
        "created_at": _iso(u.created_at),
    }


def service_json(s):
    return {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "category": s.category,
        "price_per_kg": s.price_per_kg,
        "minimum_quantity": s.minimum_quantity,
        "maximum_quantity": s.maximum_quantity,
        "image": s.image,
        "is_active": s.is_active,
        "features": s.features or [],
        "processing_time": s.processing_time,
        "available_areas": s.available_areas or [],
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
    }


def booking_json(b):
    feedback = None
    if b.has_feedback:
        feedback = {
            "rating": b.feedback_rating,
            "comment": b.feedback_comment,
            "submitted_at": _iso(b.feedback_submitted_at),
        }
    return {
        "id": b.id,
        "user": user_summary(b.user),
        "services": [
            {
                "service": {
                    "id": item.service.id,
                    "name": item.service.name,
                    "category": item.service.category,
                    "price_per_kg": item.service.price_per_kg,
                    "image": item.service.image,
                },
                "quantity": item.quantity,
                "estimated_price": item.estimated_price,
            }
            for item in b.items
        ],
        "pickup_address": b.pickup_address,
        "pickup_date": _iso(b.pickup_date),
        "pickup_time_slot": b.pickup_time_slot,
        "contact_phone": b.contact_phone,
        "alternate_phone": b.alternate_phone,
        "special_instructions": b.special_instructions,
        "status": b.status,
        "total_estimated_price": b.total_estimated_price,
        "actual_weight": b.actual_weight,
        "actual_price": b.actual_price,
        "assigned_to": user_summary(b.assigned_to),
        "images": [image_json(i) for i in b.images],
        "payment_status": b.payment_status,
        "payment_method": b.payment_method,
        "feedback": feedback,
        "created_at": _iso(b.created_at),
        "updated_at": _iso(b.updated_at),
    }


def image_json(i):
    return {"url": i.url, "description": i.description, "uploaded_at": _iso(i.uploaded_at)}


def contact_json(c):
    response = None
    if c.response_message:
        response = {
            "message": c.response_message,
            "responded_by": user_summary(c.responded_by),
            "responded_at": _iso(c.responded_at),
        }
    return {
        "id": c.id,
        "user_id": c.user_id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "subject": c.subject,
        "message": c.message,
        "category": c.category,
        "status": c.status,
        "priority": c.priority,
        "assigned_to": user_summary(c.assigned_to),
        "response": response,
        "is_read": c.is_read,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }
