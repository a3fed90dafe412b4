from django.urls import path

from .views import (
    ConnectionListView,
    ConnectionRequestView,
    ConnectionRespondView,
    ConnectionRemoveView,
    BlockUserView,
    UserSearchView,
)

app_name = "connections"

urlpatterns = [
    path("", ConnectionListView.as_view(), name="list"),
    path("request/", ConnectionRequestView.as_view(), name="request"),
    path("<int:connection_id>/respond/", ConnectionRespondView.as_view(), name="respond"),
    path("<int:connection_id>/", ConnectionRemoveView.as_view(), name="remove"),
    path("block/", BlockUserView.as_view(), name="block"),
    path("search/", UserSearchView.as_view(), name="search"),
]
