from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .round import Round  # noqa: F401
from .fixture import Fixture  # noqa: F401
from .entry import Entry, Prediction  # noqa: F401
from .settlement import RoundSettlement  # noqa: F401

__all__ = [
    "Base",
    "Round",
    "Fixture",
    "Entry",
    "Prediction",
    "RoundSettlement",
]
