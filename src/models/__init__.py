from src.models.base import Base
from src.models.token import LaunchlabToken, PumpfunToken

__all__ = [
    "Base",
    "PumpfunToken",
    "LaunchlabToken",
]
