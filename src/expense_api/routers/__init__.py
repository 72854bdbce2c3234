"""
API Routers
"""
from . import admin, categories, expenses

__all__ = ['admin', 'categories', 'expenses']
