"""Collaborator protocols and their in-memory and HTTP implementations."""

from rolegate.providers.base import (
    CredentialProvider,
    ProfileStore,
    ProjectStore,
    RoleAssignmentStore,
)

__all__ = ["CredentialProvider", "ProfileStore", "ProjectStore", "RoleAssignmentStore"]
