"""
HTTP service for the Daily Editorial PDF Generator
"""

from .app import create_app

__all__ = ['create_app']
