"""
Routes for the jobs blueprint.
"""

from flask_login import login_required

from recruitflow.blueprints.jobs import bp
from recruitflow.decorators import current_actor, json_body, role_required
from recruitflow.exceptions import ValidationError
from recruitflow.serializers import application_to_dict, job_to_dict
from recruitflow.services import job_service


@bp.route("/", methods=["POST"])
@login_required
@role_required("recruiter", "admin", "hr")
def create_job():
    """
    Create a job from a fully approved requisition.

    Body: ``{"req_no": "ORG-Req-00001", "title": ..., "is_published": ...}``.
    A requisition can be used once; a second attempt returns 409
    ``ALREADY_CONSUMED``.
    """
    data = json_body()
    req_no = data.pop("req_no", None)
    if not req_no:
        raise ValidationError("req_no is required.")
    job = job_service.create_job_from_requisition(current_actor(), str(req_no), data)
    return {"success": True, "job": job_to_dict(job)}, 201


@bp.route("/", methods=["GET"])
@login_required
def list_jobs():
    jobs = job_service.list_jobs(current_actor())
    return {"success": True, "jobs": [job_to_dict(j) for j in jobs]}


@bp.route("/<int:job_id>", methods=["GET"])
@login_required
def get_job(job_id):
    job = job_service.get_job(current_actor(), job_id)
    return {"success": True, "job": job_to_dict(job)}


@bp.route("/<int:job_id>/apply", methods=["POST"])
@login_required
@role_required("user")
def apply(job_id):
    """Apply to a published job as the logged-in applicant."""
    application = job_service.apply_to_job(
        current_actor(), job_id, json_body().get("cover_letter")
    )
    return {"success": True, "application": application_to_dict(application)}, 201


@bp.route("/<int:job_id>/applications", methods=["GET"])
@login_required
@role_required("recruiter", "admin", "hr")
def list_applications(job_id):
    applications = job_service.list_applications(current_actor(), job_id)
    return {
        "success": True,
        "applications": [application_to_dict(a) for a in applications],
    }
