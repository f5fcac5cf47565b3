"""
Routes for the admin blueprint — user management and audit logs.

All routes require the 'admin' role unless otherwise noted.  The audit
log is also readable by 'hr'.
"""

from datetime import datetime

from flask import request
from flask_login import current_user, login_required

from recruitflow.blueprints.admin import bp
from recruitflow.decorators import json_body, role_required
from recruitflow.exceptions import ValidationError
from recruitflow.serializers import audit_log_to_dict, user_to_dict
from recruitflow.services import audit_service, user_service


def _pagination(page) -> dict:
    return {"page": page.page, "pages": page.pages, "total": page.total}


# =========================================================================
# User Management (admin only)
# =========================================================================


@bp.route("/users", methods=["GET"])
@login_required
@role_required("admin")
def manage_users():
    """List application users (``?show_inactive=1`` to include inactive)."""
    users = user_service.get_all_users(
        include_inactive=request.args.get("show_inactive", "0") == "1",
        page=request.args.get("page", 1, type=int),
        per_page=request.args.get("per_page", 50, type=int),
    )
    return {
        "success": True,
        "users": [user_to_dict(u) for u in users.items],
        **_pagination(users),
    }


@bp.route("/users", methods=["POST"])
@login_required
@role_required("admin")
def provision_user():
    """Pre-provision a user with a role and department."""
    data = json_body()
    user = user_service.provision_user(
        email=data.get("email"),
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        role=data.get("role", "user"),
        department=data.get("department"),
        designation=data.get("designation"),
        provisioned_by=current_user.id,
    )
    return {"success": True, "user": user_to_dict(user)}, 201


@bp.route("/users/<int:user_id>/role", methods=["POST"])
@login_required
@role_required("admin")
def change_role(user_id):
    data = json_body()
    if not data.get("role"):
        raise ValidationError("role is required.")
    user = user_service.set_role(
        user_id,
        data["role"],
        department=data.get("department"),
        changed_by=current_user.id,
    )
    return {"success": True, "user": user_to_dict(user)}


# =========================================================================
# Audit Log (admin and hr)
# =========================================================================


def _parse_date(name: str):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an ISO date.") from exc


@bp.route("/audit-logs", methods=["GET"])
@login_required
@role_required("admin", "hr")
def audit_logs():
    """
    Filterable audit trail.

    Query parameters: ``user_id``, ``action_type``, ``entity_type``,
    ``entity_id``, ``start_date``, ``end_date``, ``page``.
    """
    logs = audit_service.get_audit_logs(
        page=request.args.get("page", 1, type=int),
        per_page=request.args.get("per_page", 50, type=int),
        user_id=request.args.get("user_id", type=int),
        action_type=request.args.get("action_type") or None,
        entity_type=request.args.get("entity_type") or None,
        entity_id=request.args.get("entity_id", type=int),
        start_date=_parse_date("start_date"),
        end_date=_parse_date("end_date"),
    )
    return {
        "success": True,
        "logs": [audit_log_to_dict(entry) for entry in logs.items],
        **_pagination(logs),
    }
