# Collaborative workspace and code runner backend

from .app import create_app

__all__ = ['create_app']
