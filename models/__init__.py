"""
Module: `models/__init__.py`.
Purpose: Imports the models so they are registered in the SQLAlchemy metadata.
"""

from .post import Post
from .post_repository import PostRepository

__all__ = ["Post", "PostRepository"]
