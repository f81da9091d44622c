"""Services layer - Business logic

Service classes are initialized with their dependencies and accessed through
the shared context in ``core.dependencies``.
"""

from .credentials import CredentialStore
from .roster import RosterService, merge_roster
from .twitch_api import HelixClient

__all__ = [
    "CredentialStore",
    "HelixClient",
    "RosterService",
    "merge_roster",
]
