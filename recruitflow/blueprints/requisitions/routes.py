"""
Routes for the requisitions blueprint.

The acting user's role comes from the session; a ``role`` or
``reviewer`` field in a request body is ignored.
"""

from flask import request
from flask_login import login_required

from recruitflow.blueprints.requisitions import bp
from recruitflow.decorators import current_actor, json_body, role_required
from recruitflow.serializers import requisition_to_dict
from recruitflow.services import approval_service, requisition_service


@bp.route("/", methods=["POST"])
@login_required
@role_required("recruiter", "sub_recruiter", "admin", "hr")
def create_requisition():
    """Raise a requisition; it starts with every stage pending."""
    requisition = requisition_service.create_requisition(current_actor(), json_body())
    return {"success": True, "requisition": requisition_to_dict(requisition)}, 201


@bp.route("/", methods=["GET"])
@login_required
def list_requisitions():
    """List requisitions visible to the current user (``?status=`` filter)."""
    status = request.args.get("status") or None
    requisitions = requisition_service.list_requisitions(current_actor(), status)
    return {
        "success": True,
        "count": len(requisitions),
        "requisitions": [requisition_to_dict(r) for r in requisitions],
    }


@bp.route("/<int:requisition_id>", methods=["GET"])
@login_required
def get_requisition(requisition_id):
    requisition = requisition_service.get_requisition(current_actor(), requisition_id)
    return {"success": True, "requisition": requisition_to_dict(requisition)}


@bp.route("/<int:requisition_id>/stages/<stage>", methods=["PUT"])
@login_required
@role_required("hod", "hr", "coo")
def decide_stage(requisition_id, stage):
    """
    Approve or reject one stage.

    Body: ``{"status": "approved" | "rejected", "comments": "..."}``.
    """
    data = json_body()
    requisition = approval_service.submit_stage_decision(
        approval_service.REQUISITION_WORKFLOW,
        requisition_id,
        stage,
        current_actor(),
        data.get("status"),
        data.get("comments"),
    )
    return {"success": True, "requisition": requisition_to_dict(requisition)}


@bp.route("/check/<path:req_no>", methods=["GET"])
@login_required
def check_requisition(req_no):
    """Report whether a job can be created from this requisition."""
    return {"success": True, **requisition_service.check_requisition_approval(req_no)}


@bp.route("/<int:requisition_id>", methods=["DELETE"])
@login_required
def delete_requisition(requisition_id):
    requisition_service.delete_requisition(current_actor(), requisition_id)
    return {"success": True}
