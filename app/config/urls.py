"""
URL configuration for the messaging service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints (SimpleJWT)
        token/                     - Obtain access/refresh pair
        token/refresh/             - Rotate refresh token
        logout/                    - Blacklist refresh token
        me/                        - Current user
    /api/v1/chat/                  - Messaging endpoints
        conversations/start/       - Start conversation (coach/scout)
        conversations/             - List / soft-delete conversations
        messages/send/             - Send message (multipart)
        messages/read/             - Mark conversation read
        messages/{id}/             - Message history / delete message

WebSocket routes live in chat/routing.py and are mounted in config/asgi.py.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# Serve uploaded attachments and avatars in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Recruit Messaging Admin"
admin.site.site_title = "Messaging Admin"
admin.site.index_title = "Conversations and users"
