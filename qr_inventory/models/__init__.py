"""ORM Models — SQLAlchemy declarative models for all registry tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - Importing this package registers every table on Base.metadata

Design Decisions:
    - One file per entity for locality
"""

from qr_inventory.models.item import Item  # noqa: F401
from qr_inventory.models.container import Container  # noqa: F401
from qr_inventory.models.spot import Spot  # noqa: F401
from qr_inventory.models.lending import Lending  # noqa: F401
from qr_inventory.models.credential import Credential  # noqa: F401
