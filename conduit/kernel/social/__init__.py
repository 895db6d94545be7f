"""
Social graph: profiles and follows.
"""

from conduit.kernel.social.profile_service import ProfileService

__all__ = ["ProfileService"]
