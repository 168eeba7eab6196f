# eventvax/models/__init__.py
# Import all models so SQLAlchemy can resolve relationships and
# Base.metadata knows every table.

from eventvax.db.base_class import Base
from eventvax.models.event import Event
from eventvax.models.ticket import Ticket
