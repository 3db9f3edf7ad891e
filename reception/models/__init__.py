# Reception Control - Database Models
# Import all models here for SQLAlchemy discovery

from reception.models.visitor import Visitor          # noqa
from reception.models.audit_entry import AuditEntry   # noqa
from reception.models.operator import Operator        # noqa
from reception.models.room import Room                # noqa
