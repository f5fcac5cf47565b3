"""
Routes for the auth blueprint.

Credential handling is not part of this application.  Sessions are
established through ``/auth/dev-login``, which only works when
``DEV_LOGIN_ENABLED`` is true; deployments front it with an SSO proxy.
All other blueprints read identity and role from the Flask-Login
session.
"""

import logging

from flask import abort, current_app, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from recruitflow.blueprints.auth import bp
from recruitflow.extensions import db
from recruitflow.models.user import User
from recruitflow.serializers import user_to_dict
from recruitflow.services import audit_service, user_service

logger = logging.getLogger(__name__)


@bp.route("/csrf-token")
def csrf_token():
    """Return a CSRF token for the ``X-CSRFToken`` header."""
    return {"csrf_token": generate_csrf()}


@bp.route("/dev-login", methods=["POST"])
def dev_login():
    """
    Development login bypass.

    Query Parameters:
        user_id (int):  Specific user ID to log in as.  Takes precedence
                        over ``role`` when both are provided.
        role (str):     Log in as the first active user with this role.
                        Defaults to ``admin``.

    Examples::

        POST /auth/dev-login?role=hod     -> first active HOD
        POST /auth/dev-login?user_id=7    -> user with id=7
    """
    if not current_app.config.get("DEV_LOGIN_ENABLED"):
        abort(404)

    user_id_param = request.args.get("user_id", type=int)
    role_param = request.args.get("role", "admin").strip().lower()

    query = User.query.filter(User.is_active == True)  # noqa: E712
    if user_id_param is not None:
        target_user = query.filter(User.id == user_id_param).first()
        missing = f"No active user found with ID {user_id_param}."
    else:
        target_user = query.filter(User.role == role_param).order_by(User.id).first()
        missing = (
            f"No active user with role '{role_param}' found. "
            "Run `flask seed-dev-users` first."
        )

    if target_user is None:
        return {"success": False, "code": "NOT_FOUND", "message": missing}, 404

    login_user(target_user)
    user_service.record_login(target_user)
    logger.info("Dev login as user %d (%s)", target_user.id, target_user.role)
    return {"success": True, "user": user_to_dict(target_user)}


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    """Log the user out and write a LOGOUT audit entry."""
    audit_service.log_logout(current_user.id)
    db.session.commit()
    logout_user()
    return {"success": True}


@bp.route("/me")
@login_required
def me():
    """Return the logged-in user."""
    return {"success": True, "user": user_to_dict(current_user)}
