"""
Authorization helpers for route-level access control.

``role_required`` is used together with Flask-Login's
``@login_required`` as a coarse first gate; the services repeat the
finer checks (assigned HOD, own department, owner-only) themselves::

    @bp.route('/<int:offer_id>/respond', methods=['POST'])
    @login_required
    @role_required('user')
    def respond(offer_id):
        ...
"""

import logging
from functools import wraps

from flask import abort, request
from flask_login import current_user

from recruitflow.exceptions import ValidationError
from recruitflow.services.actor import Actor

logger = logging.getLogger(__name__)


def role_required(*role_names: str):
    """
    Decorator that restricts access to users with one of the specified roles.

    Args:
        role_names: One or more role name strings (e.g., 'admin', 'hr').
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if not current_user.has_role(*role_names):
                logger.warning(
                    "Access denied: user %d (%s) with role '%s' "
                    "attempted %s %s (requires one of: %s)",
                    current_user.id,
                    current_user.email,
                    current_user.role,
                    request.method,
                    request.path,
                    ", ".join(role_names),
                )
                abort(403)
            return func(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> Actor:
    """Build the service-layer ``Actor`` from the logged-in user."""
    return Actor.from_user(current_user)


def json_body() -> dict:
    """Return the request's JSON object, or an empty dict for no body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data
