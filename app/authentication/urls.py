"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/token/           - Obtain JWT pair (email/password)
    /api/v1/auth/token/refresh/   - Rotate refresh token
    /api/v1/auth/logout/          - Blacklist refresh token
    /api/v1/auth/me/              - Current user
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import LoginView, LogoutView, MeView

app_name = "authentication"

urlpatterns = [
    path("token/", LoginView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
]
