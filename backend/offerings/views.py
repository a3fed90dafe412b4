from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from services import RequestContext, ValidationError
from services import offering_lifecycle
from .models import Offering
from .serializers import (
    OfferingSerializer,
    MembershipSerializer,
    KickSerializer,
    ContactShareSerializer,
    JoinRequestSerializer,
    JoinRequestResponseSerializer,
)


def _kind_param(request, default=None):
    kind = request.query_params.get("kind", default)
    if kind not in (None, Offering.KIND_PARTY, Offering.KIND_SOI):
        raise ValidationError(errors={"kind": "must be 'party' or 'soi'"})
    return kind


class LiveOfferingsView(APIView):
    """
    GET: live offerings, soonest-ending first.

    Query params:
        kind: "party" or "soi" (both when omitted)
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        offerings = offering_lifecycle.list_live_offerings(ctx, _kind_param(request))
        return Response({
            "count": len(offerings),
            "offerings": OfferingSerializer(offerings, many=True, context={"now": ctx.now}).data,
        })


class MyOfferingsView(APIView):
    """
    GET: live offerings the caller hosts or joined.
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        offerings = offering_lifecycle.list_my_offerings(ctx)
        return Response({
            "count": len(offerings),
            "offerings": OfferingSerializer(offerings, many=True, context={"now": ctx.now}).data,
        })


class ExpiredOfferingsView(APIView):
    """
    GET: offerings the caller took part in that ended within the last few minutes.
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        offerings = offering_lifecycle.list_expired_offerings(ctx)
        return Response({
            "count": len(offerings),
            "offerings": OfferingSerializer(offerings, many=True, context={"now": ctx.now}).data,
        })


class HostStatusView(APIView):
    """
    GET: whether the caller already hosts a live offering of a kind.

    Query params:
        kind: "party" (default) or "soi"
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        kind = _kind_param(request, default=Offering.KIND_PARTY)
        return Response(offering_lifecycle.host_status(ctx, kind))


class CreatePartyView(APIView):
    """
    POST: host an immediate ride.

    POST Body:
    {
        "party_size": 4,
        "duration_minutes": 20,
        "meetup_point": "Main Gate",
        "drop_off": "Railway Station",
        "ride_options": ["auto", "cab"],
        "host_comments": "Leaving soon",
        "is_friends_only": false,
        "display_university": true
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        offering = offering_lifecycle.create_party(ctx, request.data)
        return Response(
            OfferingSerializer(offering, context={"now": ctx.now}).data,
            status=status.HTTP_201_CREATED,
        )


class CreateShowOfInterestView(APIView):
    """
    POST: announce a scheduled ride.

    POST Body:
    {
        "party_size": 3,
        "start_time": "18:30",
        "meetup_point": "Library",
        "drop_off": "Airport",
        "ride_options": ["cab"],
        "expiry_timestamp": "2025-01-01T18:00:00Z",
        "display_university": false
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        offering = offering_lifecycle.create_soi(ctx, request.data)
        return Response(
            OfferingSerializer(offering, context={"now": ctx.now}).data,
            status=status.HTTP_201_CREATED,
        )


class OfferingDetailView(APIView):
    """
    GET: a single offering.
    """

    def get(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        offering = offering_lifecycle.get_offering(offering_id)
        return Response(OfferingSerializer(offering, context={"now": ctx.now}).data)


class JoinOfferingView(APIView):
    """
    POST: join a live offering.
    """

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        membership = offering_lifecycle.join(ctx, offering_id)
        return Response(MembershipSerializer(membership).data, status=status.HTTP_201_CREATED)


class LeaveOfferingView(APIView):
    """
    POST: leave an offering the caller joined.
    """

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        left = offering_lifecycle.leave(ctx, offering_id)
        return Response({"left": left})


class CancelOfferingView(APIView):
    """
    POST: host cancels their offering.
    """

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        cancelled = offering_lifecycle.cancel(ctx, offering_id)
        return Response({"cancelled": cancelled})


class KickMemberView(APIView):
    """
    POST: host removes a member.

    POST Body:
    {
        "user_id": 7
    }
    """

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        serializer = KickSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        kicked = offering_lifecycle.kick(ctx, offering_id, serializer.validated_data["user_id"])
        return Response({"kicked": kicked})


class ContactShareView(APIView):
    """
    POST: member shares (or hides) their phone number with the group.

    POST Body:
    {
        "shared": true
    }
    """

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        serializer = ContactShareSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = offering_lifecycle.set_contact_shared(
            ctx, offering_id, serializer.validated_data["shared"]
        )
        return Response(MembershipSerializer(membership).data)


class OfferingMembersView(APIView):
    """
    GET: host and joined members of an offering.
    """

    def get(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        members = offering_lifecycle.list_members(ctx, offering_id)
        return Response({"count": len(members), "members": members})


class OfferingJoinRequestsView(APIView):
    """
    GET: pending join requests for an offering (host only).
    POST: ask the host for a place.
    """

    def get(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        pending = offering_lifecycle.list_join_requests(ctx, offering_id)
        return Response({
            "count": len(pending),
            "requests": JoinRequestSerializer(pending, many=True).data,
        })

    def post(self, request, offering_id: int):
        ctx = RequestContext.from_request(request)
        join_request = offering_lifecycle.request_join(ctx, offering_id)
        return Response(JoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)


class IncomingJoinRequestsView(APIView):
    """
    GET: pending join requests across every live offering the caller hosts.
    """

    def get(self, request):
        ctx = RequestContext.from_request(request)
        pending = offering_lifecycle.list_join_requests(ctx)
        return Response({
            "count": len(pending),
            "requests": JoinRequestSerializer(pending, many=True).data,
        })


class RespondJoinRequestView(APIView):
    """
    POST: host accepts or declines a join request.

    POST Body:
    {
        "accept": true
    }
    """

    def post(self, request, request_id: int):
        ctx = RequestContext.from_request(request)
        serializer = JoinRequestResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = offering_lifecycle.respond_join_request(
            ctx, request_id, serializer.validated_data["accept"]
        )
        return Response(JoinRequestSerializer(join_request).data)


class CancelJoinRequestView(APIView):
    """
    POST: requester withdraws a pending join request.
    """

    def post(self, request, request_id: int):
        ctx = RequestContext.from_request(request)
        join_request = offering_lifecycle.cancel_join_request(ctx, request_id)
        return Response(JoinRequestSerializer(join_request).data)
