from flask import current_app, request


def page_args():
    page = request.args.get("page", type=int) or 1
    default_limit = current_app.config.get("PAGE_SIZE_DEFAULT", 10)
    max_limit = current_app.config.get("PAGE_SIZE_MAX", 100)
    limit = request.args.get("limit", type=int) or default_limit
    return max(page, 1), max(1, min(limit, max_limit))


def paginate(query):
    """Returns (rows, pagination dict) for the request's page/limit args."""
    page, limit = page_args()
    result = query.paginate(page=page, per_page=limit, error_out=False)
    return result.items, {
        "current": page,
        "total": result.pages,
        "count": len(result.items),
        "total_count": result.total,
    }


def filter_value(name: str):
    """Query-string filter; empty and 'all' mean no filter."""
    value = (request.args.get(name) or "").strip()
    if not value or value == "all":
        return None
    return value
