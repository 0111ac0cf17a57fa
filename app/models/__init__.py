"""Import all models so metadata is populated before create_all."""

from app.models.user import User  # noqa: F401
from app.models.place import Place  # noqa: F401
from app.models.service import Service  # noqa: F401
from app.models.recommendation import Recommendation  # noqa: F401
