"""
In-app notifications.

Rows are written by the workflow signal receivers in
``notification_service``; delivery to browsers is out of scope, clients
poll ``/notifications/``.
"""

from recruitflow.extensions import db


class Notification(db.Model):
    """A message addressed to one user, with an optional click-through link."""

    __tablename__ = "notification"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.String(1000), nullable=False)
    link = db.Column(db.String(300), nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    user = db.relationship("User")

    def __repr__(self) -> str:
        return f"<Notification user={self.user_id} {self.title!r} read={self.is_read}>"
