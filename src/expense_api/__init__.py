"""
Expense API Module
"""
from .main import app
from .config import settings

__all__ = ['app', 'settings']
