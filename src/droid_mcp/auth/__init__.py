from droid_mcp.auth.key_manager import AuthKeyManager
from droid_mcp.auth.middleware import BearerAuthMiddleware

__all__ = ["AuthKeyManager", "BearerAuthMiddleware"]
