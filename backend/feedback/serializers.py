from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from .models import Rating, Report


class RatingSerializer(serializers.ModelSerializer):
    rater = UserBasicSerializer(read_only=True)

    class Meta:
        model = Rating
        fields = ["id", "rater", "rated_user", "offering", "score", "comment", "created_at"]
        read_only_fields = fields


class SubmitRatingSerializer(serializers.Serializer):
    rated_user_id = serializers.IntegerField()
    offering_id = serializers.IntegerField()
    # Out-of-range scores are clamped by the service, not rejected here
    score = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = Report
        fields = ["id", "reported_user", "offering", "reason", "details", "status", "created_at"]
        read_only_fields = fields


class SubmitReportSerializer(serializers.Serializer):
    reported_user_id = serializers.IntegerField()
    reason = serializers.CharField()
    details = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    offering_id = serializers.IntegerField(required=False, allow_null=True)
