"""Database utilities and models."""

from lifepilot.db.base import Base
from lifepilot.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
