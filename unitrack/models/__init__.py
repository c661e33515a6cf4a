"""ORM Models — SQLAlchemy declarative models for the local database.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before create_all
"""

from unitrack.models.saved_timer import SavedTimer  # noqa: F401
from unitrack.models.issue_history import IssueHistoryEntry  # noqa: F401
