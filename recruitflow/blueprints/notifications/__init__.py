"""
Notifications blueprint — the current user's inbox.
"""

from flask import Blueprint

bp = Blueprint("notifications", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.notifications import routes  # noqa: E402, F401
