"""rolegate - authentication and role-based authorization core for the workspace."""

__all__ = ["Capability", "Role", "RolegateConfig", "WorkspaceClient", "capabilities_of"]
__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports - keep ``import rolegate`` free of httpx until a client is built."""
    if name == "WorkspaceClient":
        from rolegate.client import WorkspaceClient

        return WorkspaceClient
    if name == "RolegateConfig":
        from rolegate.config import RolegateConfig

        return RolegateConfig
    if name == "Capability":
        from rolegate.capabilities import Capability

        return Capability
    if name in ("Role", "capabilities_of"):
        from rolegate import roles

        return getattr(roles, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
