"""
Admin blueprint — user provisioning and the audit trail.
"""

from flask import Blueprint

bp = Blueprint("admin", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.admin import routes  # noqa: E402, F401
