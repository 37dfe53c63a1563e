"""SQLAlchemy ORM models."""

# Import all models so Base.metadata registers them for create_all().
from sdp_server.models.command import CommandRecord as CommandRecord
