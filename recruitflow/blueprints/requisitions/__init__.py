"""
Requisitions blueprint — raise, view, decide and delete requisitions.
"""

from flask import Blueprint

bp = Blueprint("requisitions", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.requisitions import routes  # noqa: E402, F401
