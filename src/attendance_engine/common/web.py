from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, session

from ..core.exceptions import AuthorizationError, NotFoundError, OutsideGeofence, ValidationError

logger = logging.getLogger(__name__)


def ok(message: str, data: Any = None, status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def fail(message: str, status: int = 400, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])


def handle_domain_errors(view):
    """Map domain exceptions to JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except OutsideGeofence as e:
            return fail(str(e), 403, distance=e.distance_m, closestLocation=e.nearest_location_name)
        except ValidationError as e:
            return fail(str(e), 400)
        except NotFoundError as e:
            return fail(str(e), 404)
        except AuthorizationError as e:
            return fail(str(e), 403)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return fail("Internal server error", 500)

    return wrapper
