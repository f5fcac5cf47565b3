"""
Auth blueprint — development login, logout and current user.
"""

from flask import Blueprint

bp = Blueprint("auth", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.auth import routes  # noqa: E402, F401
