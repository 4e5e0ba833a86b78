"""
URL configuration for the messaging service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - JWT token endpoints
        token/                     - Obtain access/refresh pair
        token/refresh/             - Refresh access token
    /api/v1/messaging/             - Messaging endpoints
        groups/                    - Group list/create (staff)
        groups/{id}/               - Group detail/replace/deactivate (staff)
        groups/{id}/messages/      - Group message list/send (members)
        my-groups/                 - Groups of the current user
        my-groups/{id}/            - Group detail for a member
        conversations/             - Direct message inbox
        conversations/{user_id}/   - Thread with one user (marks read)
        messages/                  - Send direct message
        messages/{id}/             - Get/delete direct message
    /api/v1/notifications/         - Notification inbox
        {id}/read/                 - Mark one read
        read-all/                  - Mark all read
        unread-count/              - Unread badge count

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("messaging/", include("messaging.urls")),
    path("notifications/", include("notifications.urls")),
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

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Messaging Admin"
admin.site.site_title = "Messaging Admin"
admin.site.index_title = "Groups, messages and notifications"
