"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import ProfileFactory, ApplicationFactory
"""

from tests.factories.base import BaseFactory, generate_uuid7, utc_now
from tests.factories.profile import ApplicationFactory, ProfileFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid7",
    "utc_now",
    # Models
    "ApplicationFactory",
    "ProfileFactory",
]
