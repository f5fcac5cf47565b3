"""
Offers blueprint — issue offers, approval decisions, candidate responses.
"""

from flask import Blueprint

bp = Blueprint("offers", __name__)

# Import routes after blueprint creation to avoid circular imports.
from recruitflow.blueprints.offers import routes  # noqa: E402, F401
