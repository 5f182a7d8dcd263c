"""
ELOCUTE Server
==============

HTTP handlers over a registry of Words.
"""

from .handler import WordRegistry
from .routes import app, create_app

__all__ = ['WordRegistry', 'app', 'create_app']
