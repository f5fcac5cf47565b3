"""
JSON shapes returned by the API.

Models stay free of presentation concerns; routes pass them through the
functions here before returning.  Timestamps are ISO 8601 and money is a
decimal string.
"""

from recruitflow.models.approval import StageApproval
from recruitflow.services import approval_service


def _iso(value):
    return value.isoformat() if value is not None else None


def _money(value):
    return str(value) if value is not None else None


def stage_to_dict(stage: StageApproval) -> dict:
    return {
        "status": stage.status.value,
        "reviewer_id": stage.reviewer_id,
        "reviewed_at": _iso(stage.reviewed_at),
        "comments": stage.comments,
    }


def _approval_block(definition, entity) -> dict:
    return {
        "stages": {s.name: stage_to_dict(s) for s in entity.stages()},
        "overall_status": entity.overall_status,
        "active_stage": approval_service.active_stage(definition, entity),
    }


def user_to_dict(user) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.full_name,
        "role": user.role,
        "department": user.department,
        "designation": user.designation,
        "is_active": user.is_active,
        "last_login": _iso(user.last_login),
    }


def requisition_to_dict(requisition) -> dict:
    return {
        "id": requisition.id,
        "requisition_number": requisition.requisition_number,
        "position": requisition.position,
        "department": requisition.department,
        "location": requisition.location,
        "requisition_type": requisition.requisition_type,
        "nature_of_employment": requisition.nature_of_employment,
        "grade": requisition.grade,
        "salary": _money(requisition.salary),
        "description": requisition.description,
        "experience": requisition.experience,
        "replacement_name": requisition.replacement_name,
        "replacement_reason": requisition.replacement_reason,
        "created_by_id": requisition.created_by_id,
        "assigned_hod_id": requisition.assigned_hod_id,
        "job_id": requisition.job.id if requisition.job else None,
        "created_at": _iso(requisition.created_at),
        **_approval_block(approval_service.REQUISITION_WORKFLOW, requisition),
    }


def job_to_dict(job) -> dict:
    return {
        "id": job.id,
        "title": job.title,
        "department": job.department,
        "location": job.location,
        "description": job.description,
        "employment_type": job.employment_type,
        "experience_required": job.experience_required,
        "deadline": _iso(job.deadline),
        "is_published": job.is_published,
        "requisition_id": job.requisition_id,
        "created_by_id": job.created_by_id,
        "created_at": _iso(job.created_at),
    }


def application_to_dict(application) -> dict:
    offer = application.current_offer
    return {
        "id": application.id,
        "job_id": application.job_id,
        "applicant_id": application.applicant_id,
        "applicant_name": application.applicant.full_name,
        "status": application.status,
        "cover_letter": application.cover_letter,
        "current_offer_id": offer.id if offer else None,
        "created_at": _iso(application.created_at),
    }


def offer_to_dict(offer) -> dict:
    return {
        "id": offer.id,
        "application_id": offer.application_id,
        "designation": offer.designation,
        "department": offer.department,
        "location": offer.location,
        "grade": offer.grade,
        "offered_salary": _money(offer.offered_salary),
        "approval_status": offer.approval_status,
        "assigned_hod_id": offer.assigned_hod_id,
        "response_status": offer.response_status,
        "response_comment": offer.response_comment,
        "responded_at": _iso(offer.responded_at),
        "sent_by_id": offer.sent_by_id,
        "sent_at": _iso(offer.sent_at),
        **_approval_block(approval_service.OFFER_WORKFLOW, offer),
    }


def notification_to_dict(notification) -> dict:
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "link": notification.link,
        "is_read": notification.is_read,
        "created_at": _iso(notification.created_at),
    }


def audit_log_to_dict(entry) -> dict:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "action_type": entry.action_type,
        "entity_type": entry.entity_type,
        "entity_id": entry.entity_id,
        "previous_value": entry.previous_value,
        "new_value": entry.new_value,
        "ip_address": entry.ip_address,
        "created_at": _iso(entry.created_at),
    }
