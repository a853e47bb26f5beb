"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Church is the tenant root; every tenant-scoped row carries its church id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.church import Church  # noqa: F401
from app.models.campus import Campus  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.church_member import ChurchMember  # noqa: F401
from app.models.custom_role import CustomRole  # noqa: F401
from app.models.role_permission import RolePermission  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.pathway import Pathway  # noqa: F401
from app.models.pathway_step import PathwayStep  # noqa: F401
from app.models.pathway_progress import PathwayProgress  # noqa: F401
from app.models.step_completion import StepCompletion  # noqa: F401
