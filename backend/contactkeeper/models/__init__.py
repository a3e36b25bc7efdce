"""ORM models. Importing this package registers every table with Base.metadata."""

from contactkeeper.models.user import User
from contactkeeper.models.contact import Contact

__all__ = ["User", "Contact"]
