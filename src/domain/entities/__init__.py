"""
Social API Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import SessionState, UserRole

# Export all entities
from .user import User
from .session import Session, generate_session_id
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "UserRole",
    "SessionState",
    # Entities
    "User",
    "Session",
    "PasswordResetToken",
    # Helpers
    "generate_session_id",
]
