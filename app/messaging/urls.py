"""
URL configuration for messaging API.

URL Structure:
    Groups (staff):
        /groups/                      GET, POST
        /groups/{id}/                 GET, PUT, DELETE

    Group messages (members):
        /groups/{id}/messages/        GET, POST

    Member groups:
        /my-groups/                   GET
        /my-groups/{id}/              GET

    Direct messages:
        /conversations/               GET
        /conversations/{user_id}/     GET
        /messages/                    POST
        /messages/{id}/               GET, DELETE

All URLs are prefixed with /api/v1/messaging/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from messaging.views import (
    ConversationViewSet,
    DirectMessageViewSet,
    GroupMessageViewSet,
    GroupViewSet,
    MyGroupViewSet,
)

router = DefaultRouter()
router.register(r"groups", GroupViewSet, basename="group")
router.register(r"my-groups", MyGroupViewSet, basename="my-group")
router.register(r"conversations", ConversationViewSet, basename="conversation")
router.register(r"messages", DirectMessageViewSet, basename="direct-message")

app_name = "messaging"

urlpatterns = [
    path("", include(router.urls)),
    # Nested route for a group's message stream
    path(
        "groups/<int:group_pk>/messages/",
        GroupMessageViewSet.as_view({"get": "list", "post": "create"}),
        name="group-message-list",
    ),
]
