"""
Serializers for the Friends app.
"""
from rest_framework import serializers


class SendFriendRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class FriendRequestSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    from_user_id = serializers.CharField(read_only=True)
    to_user_id = serializers.CharField(read_only=True)
    from_user_email = serializers.CharField(read_only=True)
    from_user_name = serializers.CharField(read_only=True)
    from_user_photo = serializers.CharField(read_only=True)
    to_user_email = serializers.CharField(read_only=True)
    status = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
    updated_at = serializers.DateTimeField(read_only=True, allow_null=True)

    def get_status(self, obj):
        return obj.status.value


class FriendshipSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    user_id = serializers.CharField(read_only=True)
    friend_id = serializers.CharField(read_only=True)
    friend_email = serializers.CharField(read_only=True)
    friend_name = serializers.CharField(read_only=True)
    friend_photo = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
