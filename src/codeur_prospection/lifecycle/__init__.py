"""
Prospect lifecycle package.
"""

from .manager import ALLOWED_TRANSITIONS, LeadLifecycleManager, can_transition

__all__ = ["ALLOWED_TRANSITIONS", "LeadLifecycleManager", "can_transition"]
