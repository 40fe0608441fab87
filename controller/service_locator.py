"""Service locator for the namespace shared by all routes."""

from typing import Optional

from controller.namespace import Namespace

_namespace: Optional[Namespace] = None


def set_namespace(namespace: Optional[Namespace]):
    """Set global namespace instance (None resets to a fresh one on next access)"""
    global _namespace
    _namespace = namespace


def get_namespace() -> Namespace:
    """Get global namespace instance, creating an empty one on first use"""
    global _namespace
    if _namespace is None:
        _namespace = Namespace()
    return _namespace
