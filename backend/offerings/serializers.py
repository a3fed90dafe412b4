from datetime import timedelta

from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from common.utils.clock import next_occurrence
from services.offering_lifecycle import is_live, free_slots
from .models import Offering, Membership, JoinRequest


class OfferingSerializer(serializers.ModelSerializer):
    """
    Read representation shared by parties and shows of interest.

    `now` in the serializer context is the request's clock reading; list
    services may attach `is_joined`, `ended_reason` and `ended_at` to the
    instances before serialization.
    """
    host = UserBasicSerializer(read_only=True)
    host_university = serializers.SerializerMethodField()
    free_slots = serializers.SerializerMethodField()
    is_live = serializers.SerializerMethodField()
    is_joined = serializers.SerializerMethodField()
    ended_reason = serializers.SerializerMethodField()
    ended_at = serializers.SerializerMethodField()

    class Meta:
        model = Offering
        fields = [
            "id",
            "kind",
            "host",
            "party_size",
            "member_count",
            "free_slots",
            "meetup_point",
            "drop_off",
            "ride_options",
            "display_university",
            "host_university",
            "is_active",
            "duration_minutes",
            "expires_at",
            "host_comments",
            "is_friends_only",
            "start_time",
            "expiry_timestamp",
            "created_at",
            "cancelled_at",
            "is_live",
            "is_joined",
            "ended_reason",
            "ended_at",
        ]
        read_only_fields = fields

    def get_host_university(self, obj):
        return obj.host_university if obj.display_university else None

    def get_free_slots(self, obj):
        return free_slots(obj)

    def get_is_live(self, obj):
        now = self.context.get("now")
        return is_live(obj, now) if now else None

    def get_is_joined(self, obj):
        return getattr(obj, "is_joined", None)

    def get_ended_reason(self, obj):
        return getattr(obj, "ended_reason", None)

    def get_ended_at(self, obj):
        value = getattr(obj, "ended_at", None)
        return serializers.DateTimeField().to_representation(value) if value else None


class OfferingCreateSerializer(serializers.Serializer):
    """Fields shared by party and show-of-interest creation"""
    meetup_point = serializers.CharField(max_length=255)
    drop_off = serializers.CharField(max_length=255)
    ride_options = serializers.ListField(
        child=serializers.ChoiceField(choices=Offering.RIDE_OPTION_CHOICES), required=False, default=list
    )
    display_university = serializers.BooleanField(default=False)

    def validate_ride_options(self, value):
        # keep first occurrence order
        return list(dict.fromkeys(value))


class PartyCreateSerializer(OfferingCreateSerializer):
    """Serializer for hosting a party; `now` in context anchors the window"""
    party_size = serializers.IntegerField(min_value=2, max_value=7)
    duration_minutes = serializers.IntegerField(min_value=1, max_value=120)
    host_comments = serializers.CharField(
        max_length=500, required=False, allow_blank=True, allow_null=True, default=None
    )
    is_friends_only = serializers.BooleanField(default=False)

    def validate_host_comments(self, value):
        return value or None

    def validate(self, attrs):
        attrs["expires_at"] = self.context["now"] + timedelta(minutes=attrs["duration_minutes"])
        return attrs


class ShowOfInterestCreateSerializer(OfferingCreateSerializer):
    """Serializer for announcing a scheduled ride"""
    party_size = serializers.IntegerField(min_value=1, max_value=7)
    ride_options = serializers.ListField(
        child=serializers.ChoiceField(choices=Offering.RIDE_OPTION_CHOICES), required=False, default=list,
        max_length=2,
    )
    start_time = serializers.CharField()
    expiry_timestamp = serializers.DateTimeField(required=False, allow_null=True, default=None)

    def validate_start_time(self, value):
        try:
            return next_occurrence(value, self.context["now"])
        except ValueError:
            raise serializers.ValidationError("Must be a clock time in HH:MM format.")

    def validate_expiry_timestamp(self, value):
        if value is not None and value <= self.context["now"]:
            raise serializers.ValidationError("Must be in the future.")
        return value


class MembershipSerializer(serializers.ModelSerializer):
    user = UserBasicSerializer(read_only=True)

    class Meta:
        model = Membership
        fields = ["id", "offering", "user", "status", "contact_shared", "joined_at", "left_at"]
        read_only_fields = fields


class KickSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()


class ContactShareSerializer(serializers.Serializer):
    shared = serializers.BooleanField()


class JoinRequestSerializer(serializers.ModelSerializer):
    user = UserBasicSerializer(read_only=True)

    class Meta:
        model = JoinRequest
        fields = ["id", "offering", "user", "status", "created_at", "responded_at"]
        read_only_fields = fields


class JoinRequestResponseSerializer(serializers.Serializer):
    accept = serializers.BooleanField()
