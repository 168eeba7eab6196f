# eventvax/crud/__init__.py

from .crud_event import event
from .crud_ticket import ticket
