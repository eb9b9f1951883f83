"""
URL configuration for the chat backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /media/                        - Uploaded voice clips (DEBUG only)
    /api/v1/auth/                  - Session gate
        login/                     - Log in or register by name + secret
        search/                    - Exact-name user lookup
    /api/v1/chat/                  - Chat endpoints
        chats/                     - List a user's chats / open a direct chat
        groups/                    - Create a group chat
        groups/rename/             - Rename a group (admin only)
        messages/                  - List / send text messages
        messages/voice/            - Send a voice clip
        messages/seen/             - Mark messages as seen
        messages/delete/           - Delete a message for everyone
        typing/                    - Typing indicator (broadcast only)

WebSocket routes live in chat/routing.py.
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

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Users, chats and messages"
