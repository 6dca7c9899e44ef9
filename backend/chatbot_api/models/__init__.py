from chatbot_api.models.preferences import UserPreferences
from chatbot_api.models.refresh_token import RefreshToken
from chatbot_api.models.user import AuthProvider, Role, User

__all__ = [
    "AuthProvider",
    "RefreshToken",
    "Role",
    "User",
    "UserPreferences",
]
