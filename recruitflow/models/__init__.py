"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - user.py         -> users
  - requisition.py  -> requisition (inline HOD/HR/COO stages)
  - job.py          -> job, application
  - offer.py        -> offer (inline HOD/COO stages)
  - notification.py -> notification
  - audit.py        -> audit_log
"""

from recruitflow.models.user import ROLES, User  # noqa: F401
from recruitflow.models.requisition import Requisition  # noqa: F401
from recruitflow.models.job import Application, Job  # noqa: F401
from recruitflow.models.offer import Offer, OfferApprovalStatus  # noqa: F401
from recruitflow.models.notification import Notification  # noqa: F401
from recruitflow.models.audit import AuditLog  # noqa: F401
from recruitflow.models.approval import ApprovalStatus  # noqa: F401
