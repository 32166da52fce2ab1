"""API blueprints.

Importing this package requires ``configure_spectree()`` to have run, since
the endpoint modules decorate their views with the global Spectree instance.
"""

from flask import Blueprint

# Create main API blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")

from enterprise_metrics.api.cache import cache_bp  # noqa: E402
from enterprise_metrics.api.database import database_bp  # noqa: E402
from enterprise_metrics.api.errors import errors_bp  # noqa: E402
from enterprise_metrics.api.orders import orders_bp  # noqa: E402
from enterprise_metrics.api.users import users_bp  # noqa: E402

api_bp.register_blueprint(orders_bp)
api_bp.register_blueprint(users_bp)
api_bp.register_blueprint(cache_bp)
api_bp.register_blueprint(database_bp)
api_bp.register_blueprint(errors_bp)
