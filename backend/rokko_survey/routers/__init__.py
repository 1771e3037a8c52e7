# backend/rokko_survey/routers/__init__.py
from . import dashboard, uploads

__all__ = ["dashboard", "uploads"]
