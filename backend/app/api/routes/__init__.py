# API Routes Module
from app.api.routes import packages

__all__ = [
    "packages",
]
