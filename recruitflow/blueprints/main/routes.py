"""
Routes for the main blueprint — dashboard and health check.
"""

from flask_login import login_required
from sqlalchemy import text

from recruitflow.blueprints.main import bp
from recruitflow.decorators import current_actor
from recruitflow.extensions import db
from recruitflow.services import (
    notification_service,
    offer_service,
    requisition_service,
)


@bp.route("/")
@login_required
def dashboard():
    """
    Summary counts for the current user's role.

    Requisition counts are by overall status within the user's view;
    ``pending_offers`` is the user's offer approval queue.
    """
    actor = current_actor()
    counts = {
        status: len(requisition_service.list_requisitions(actor, status))
        for status in ("pending", "approved", "rejected")
    }
    return {
        "success": True,
        "role": actor.role,
        "requisitions": counts,
        "pending_offers": len(offer_service.list_pending_offers(actor)),
        "unread_notifications": len(
            notification_service.list_notifications(actor, unread_only=True)
        ),
    }


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database.
    """
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except Exception as exc:  # pylint: disable=broad-except
        return {"status": "unhealthy", "database": str(exc)}, 503
