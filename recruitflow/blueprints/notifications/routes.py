"""
Routes for the notifications blueprint.

Every route acts on the current user's own notifications only.
"""

from flask import request
from flask_login import login_required

from recruitflow.blueprints.notifications import bp
from recruitflow.decorators import current_actor
from recruitflow.serializers import notification_to_dict
from recruitflow.services import notification_service


@bp.route("/", methods=["GET"])
@login_required
def list_notifications():
    """List notifications, newest first (``?unread=1`` for unread only)."""
    unread_only = request.args.get("unread", "0") == "1"
    notifications = notification_service.list_notifications(current_actor(), unread_only)
    return {
        "success": True,
        "unread": sum(1 for n in notifications if not n.is_read),
        "notifications": [notification_to_dict(n) for n in notifications],
    }


@bp.route("/<int:notification_id>/read", methods=["POST"])
@login_required
def mark_read(notification_id):
    notification = notification_service.mark_read(current_actor(), notification_id)
    return {"success": True, "notification": notification_to_dict(notification)}


@bp.route("/<int:notification_id>/open", methods=["GET"])
@login_required
def open_notification(notification_id):
    """Mark read and return the frontend route for the user's role."""
    return {
        "success": True,
        **notification_service.open_notification(current_actor(), notification_id),
    }


@bp.route("/<int:notification_id>", methods=["DELETE"])
@login_required
def delete_notification(notification_id):
    notification_service.delete_notification(current_actor(), notification_id)
    return {"success": True}
