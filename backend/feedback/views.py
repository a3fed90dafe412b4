from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from services import RequestContext
from services import feedback
from .models import Report
from .serializers import (
    RatingSerializer,
    SubmitRatingSerializer,
    ReportSerializer,
    SubmitReportSerializer,
)


class SubmitRatingView(APIView):
    """
    POST: rate another rider after a shared offering.

    POST Body:
    {
        "rated_user_id": 7,
        "offering_id": 42,
        "score": 5,
        "comment": "On time"
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        serializer = SubmitRatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rating = feedback.submit_rating(
            ctx,
            rated_user_id=data["rated_user_id"],
            offering_id=data["offering_id"],
            score=data["score"],
            comment=data.get("comment"),
        )
        return Response(RatingSerializer(rating).data, status=status.HTTP_201_CREATED)


class UserRatingsView(APIView):
    """
    GET: rating summary for a user.
    """

    def get(self, request, user_id: int):
        summary = feedback.rating_summary(user_id)
        return Response({
            "user_id": user_id,
            "average_rating": summary["average_rating"],
            "total_ratings": summary["total_ratings"],
            "ratings": RatingSerializer(summary["ratings"], many=True).data,
        })


class SubmitReportView(APIView):
    """
    POST: report another user.

    POST Body:
    {
        "reported_user_id": 7,
        "reason": "no_show",
        "details": "Never came to the gate",
        "offering_id": 42
    }
    """

    def post(self, request):
        ctx = RequestContext.from_request(request)
        serializer = SubmitReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        report = feedback.submit_report(
            ctx,
            reported_user_id=data["reported_user_id"],
            reason=data["reason"],
            details=data.get("details"),
            offering_id=data.get("offering_id"),
        )
        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)


class ReportReasonsView(APIView):
    """GET: the reasons a report can be filed for."""

    def get(self, request):
        return Response({
            "reasons": [{"value": value, "label": label} for value, label in Report.REASON_CHOICES]
        })
