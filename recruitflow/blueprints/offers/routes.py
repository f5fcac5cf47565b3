"""
Routes for the offers blueprint.

Offers go HOD then COO; the applicant answers once the offer is
approved.
"""

from flask_login import login_required

from recruitflow.blueprints.offers import bp
from recruitflow.decorators import current_actor, json_body, role_required
from recruitflow.serializers import offer_to_dict
from recruitflow.services import offer_service


@bp.route("/applications/<int:application_id>", methods=["POST"])
@login_required
@role_required("recruiter", "admin", "hr")
def issue_offer(application_id):
    """Issue an offer on an application; body needs ``offered_salary``."""
    offer = offer_service.issue_offer(current_actor(), application_id, json_body())
    return {"success": True, "offer": offer_to_dict(offer)}, 201


@bp.route("/pending", methods=["GET"])
@login_required
def pending_offers():
    """Offers waiting on the current user's role."""
    offers = offer_service.list_pending_offers(current_actor())
    return {"success": True, "offers": [offer_to_dict(o) for o in offers]}


@bp.route("/<int:offer_id>", methods=["GET"])
@login_required
def get_offer(offer_id):
    offer = offer_service.get_offer(current_actor(), offer_id)
    return {"success": True, "offer": offer_to_dict(offer)}


@bp.route("/<int:offer_id>/stages/<stage>", methods=["PUT"])
@login_required
@role_required("hod", "coo")
def decide_stage(offer_id, stage):
    """Body: ``{"status": "approved" | "rejected", "comments": "..."}``."""
    data = json_body()
    offer = offer_service.decide_offer_stage(
        current_actor(), offer_id, stage, data.get("status"), data.get("comments")
    )
    return {"success": True, "offer": offer_to_dict(offer)}


@bp.route("/<int:offer_id>/respond", methods=["POST"])
@login_required
@role_required("user")
def respond(offer_id):
    """Body: ``{"response": "accepted" | "rejected", "comment": "..."}``."""
    data = json_body()
    offer = offer_service.respond_to_offer(
        current_actor(), offer_id, data.get("response"), data.get("comment")
    )
    return {"success": True, "offer": offer_to_dict(offer)}
