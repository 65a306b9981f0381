# Import every model so Base.metadata is complete for Alembic and create_all
from app.models.contract import Contract
from app.models.history import HistoryEntry
from app.models.measurement import Measurement
from app.models.office import Office
from app.models.user import User

__all__ = ["Contract", "HistoryEntry", "Measurement", "Office", "User"]
