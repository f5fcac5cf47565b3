"""
Audit logging model.

``AuditLog`` records every change to a workflow entity: creation,
stage decisions, consumption by a job, offer responses and deletion.
"""

from recruitflow.extensions import db


class AuditLog(db.Model):
    """
    One recorded data change.

    ``action_type`` values: CREATE, APPROVE, REJECT, CONSUME, RESPOND,
    UPDATE, DELETE, LOGIN, LOGOUT.

    JSON conventions for ``previous_value`` / ``new_value``:
      - CREATE: previous_value is NULL, new_value has the new record.
      - APPROVE / REJECT: both contain only the decided stage.
      - DELETE: previous_value has the record, new_value is NULL.
    """

    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    action_type = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(100), nullable=False, index=True)
    entity_id = db.Column(db.Integer, nullable=True)
    previous_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    user = db.relationship("User")

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action_type} {self.entity_type}"
            f":{self.entity_id}>"
        )
