"""
Jobs blueprint — jobs created from requisitions, and applications.
"""

from flask import Blueprint

bp = Blueprint("jobs", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.jobs import routes  # noqa: E402, F401
