"""Authentication and authorization gates."""
from .dependencies import get_current_account, require_capability
from .permissions import Capability, has_capability

__all__ = ["Capability", "get_current_account", "has_capability", "require_capability"]
