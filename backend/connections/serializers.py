from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from .models import Connection


class ConnectionSerializer(serializers.ModelSerializer):
    requester = UserBasicSerializer(read_only=True)
    addressee = UserBasicSerializer(read_only=True)
    other_user = serializers.SerializerMethodField()

    class Meta:
        model = Connection
        fields = [
            "id",
            "requester",
            "addressee",
            "other_user",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_other_user(self, obj):
        """The counterpart from the point of view of `current_user_id` in context."""
        current_user_id = self.context.get("current_user_id")
        if current_user_id is None:
            return None
        other = obj.addressee if obj.requester_id == current_user_id else obj.requester
        return UserBasicSerializer(other).data


class ConnectionRequestSerializer(serializers.Serializer):
    """Target a user by id or by username; exactly one is required."""
    user_id = serializers.IntegerField(required=False)
    username = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if data.get("user_id") is None and not (data.get("username") or "").strip():
            raise serializers.ValidationError("Provide either user_id or username")
        return data


class ConnectionResponseSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class BlockSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
