from django.urls import path

from .views import (
    LiveOfferingsView,
    MyOfferingsView,
    ExpiredOfferingsView,
    HostStatusView,
    CreatePartyView,
    CreateShowOfInterestView,
    OfferingDetailView,
    JoinOfferingView,
    LeaveOfferingView,
    CancelOfferingView,
    KickMemberView,
    ContactShareView,
    OfferingMembersView,
    OfferingJoinRequestsView,
    IncomingJoinRequestsView,
    RespondJoinRequestView,
    CancelJoinRequestView,
)

app_name = "offerings"

urlpatterns = [
    # LISTS
    path("live/", LiveOfferingsView.as_view(), name="live"),
    path("mine/", MyOfferingsView.as_view(), name="mine"),
    path("expired/", ExpiredOfferingsView.as_view(), name="expired"),
    path("status/", HostStatusView.as_view(), name="host-status"),

    # CREATE
    path("party/", CreatePartyView.as_view(), name="create-party"),
    path("soi/", CreateShowOfInterestView.as_view(), name="create-soi"),

    # SINGLE OFFERING
    path("<int:offering_id>/", OfferingDetailView.as_view(), name="detail"),
    path("<int:offering_id>/join/", JoinOfferingView.as_view(), name="join"),
    path("<int:offering_id>/leave/", LeaveOfferingView.as_view(), name="leave"),
    path("<int:offering_id>/cancel/", CancelOfferingView.as_view(), name="cancel"),
    path("<int:offering_id>/kick/", KickMemberView.as_view(), name="kick"),
    path("<int:offering_id>/contact/", ContactShareView.as_view(), name="contact"),
    path("<int:offering_id>/members/", OfferingMembersView.as_view(), name="members"),
    path("<int:offering_id>/requests/", OfferingJoinRequestsView.as_view(), name="join-requests"),

    # JOIN REQUESTS
    path("requests/", IncomingJoinRequestsView.as_view(), name="incoming-join-requests"),
    path("requests/<int:request_id>/respond/", RespondJoinRequestView.as_view(), name="respond-join-request"),
    path("requests/<int:request_id>/cancel/", CancelJoinRequestView.as_view(), name="cancel-join-request"),
]
