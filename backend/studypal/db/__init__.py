"""Database utilities and models."""

from studypal.db.base import Base
from studypal.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
