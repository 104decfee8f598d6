"""
Calendar Infrastructure Repositories
"""

from .credential_repository import SQLAlchemyCredentialRepository

__all__ = ["SQLAlchemyCredentialRepository"]
