"""
Serializers for the Alerts app.
"""
from rest_framework import serializers


class SendAlertSerializer(serializers.Serializer):
    to_user_id = serializers.CharField(max_length=128)
    message = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate_to_user_id(self, value):
        if value == self.context['request'].user.uid:
            raise serializers.ValidationError('You cannot send an alert to yourself.')
        return value


class AlertSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    from_user_id = serializers.CharField(read_only=True)
    to_user_id = serializers.CharField(read_only=True)
    from_user_name = serializers.CharField(read_only=True)
    from_user_photo = serializers.CharField(read_only=True)
    message = serializers.CharField(read_only=True)
    is_read = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
