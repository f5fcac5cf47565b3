"""
Audit service — records workflow changes and queries audit logs.

Every create, stage decision, consumption and delete on a workflow
entity passes through ``log_change`` *before* the service commits, so
the audit row and the change it describes land in the same transaction.
"""

import json
import logging
from datetime import datetime
from typing import Any

from flask import request
from sqlalchemy import desc

from recruitflow.extensions import db
from recruitflow.models.audit import AuditLog

logger = logging.getLogger(__name__)


# -- Write audit entries ---------------------------------------------------


def log_change(
    user_id: int | None,
    action_type: str,
    entity_type: str,
    entity_id: int | None,
    previous_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Record a data change in the audit log.

    The entry is added and flushed but not committed; the caller owns
    the transaction.

    Args:
        user_id:        ID of the user who made the change, or None for
                        system actions.
        action_type:    One of CREATE, APPROVE, REJECT, CONSUME, RESPOND,
                        UPDATE, DELETE, LOGIN, LOGOUT.
        entity_type:    Entity name (e.g., 'requisition', 'offer').
        entity_id:      Primary key of the affected record.
        previous_value: Dict of the record state before the change.
        new_value:      Dict of the record state after the change.

    Returns:
        The newly created AuditLog record.
    """
    # Capture request metadata when available (inside a request context).
    ip_address = None
    user_agent = None
    try:
        ip_address = request.remote_addr
        user_agent = str(request.user_agent)[:500]
    except RuntimeError:
        # Outside of a request context (e.g., CLI or tests).
        pass

    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_value=json.dumps(previous_value, default=str) if previous_value else None,
        new_value=json.dumps(new_value, default=str) if new_value else None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)
    db.session.flush()

    logger.info(
        "Audit: %s %s:%s by user %s",
        action_type,
        entity_type,
        entity_id,
        user_id,
    )
    return entry


def log_login(user_id: int) -> AuditLog:
    """Record a successful user login."""
    return log_change(
        user_id=user_id,
        action_type="LOGIN",
        entity_type="user",
        entity_id=user_id,
    )


def log_logout(user_id: int) -> AuditLog:
    """Record a user logout."""
    return log_change(
        user_id=user_id,
        action_type="LOGOUT",
        entity_type="user",
        entity_id=user_id,
    )


# -- Query audit logs ------------------------------------------------------


def get_audit_logs(
    page: int = 1,
    per_page: int = 50,
    user_id: int | None = None,
    action_type: str | None = None,
    entity_type: str | None = None,
    entity_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """
    Query audit logs with optional filters and pagination.

    Returns:
        A SQLAlchemy pagination object with ``.items``, ``.pages``,
        ``.total``, etc.
    """
    query = AuditLog.query.order_by(desc(AuditLog.created_at), desc(AuditLog.id))

    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == entity_id)
    if start_date:
        query = query.filter(AuditLog.created_at >= start_date)
    if end_date:
        query = query.filter(AuditLog.created_at <= end_date)

    return query.paginate(page=page, per_page=per_page, error_out=False)
