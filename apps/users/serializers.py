"""
Serializers for the Users app.

Field names mirror the snake_case keys stored on user documents.
"""
from rest_framework import serializers


class UserSerializer(serializers.Serializer):
    """
    Read-only representation of a user profile.
    The push token is never exposed.
    """
    id = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    profile_picture_url = serializers.CharField(read_only=True)
    location_sharing_enabled = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
    last_active = serializers.DateTimeField(read_only=True, allow_null=True)


class UserRegistrationSerializer(serializers.Serializer):
    """
    Create-or-update the caller's profile after signing in.
    Email defaults to the one on the Firebase token.
    """
    email = serializers.EmailField(required=False)
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    profile_picture_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    fcm_token = serializers.CharField(max_length=4096, required=False, allow_blank=True)

    def validate(self, attrs):
        user = self.context['request'].user
        if not attrs.get('email') and not user.email:
            raise serializers.ValidationError(
                {'email': 'An email address is required.'}
            )
        return attrs


class UserUpdateSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    profile_picture_url = serializers.URLField(max_length=500, required=False, allow_blank=True)


class FcmTokenSerializer(serializers.Serializer):
    fcm_token = serializers.CharField(max_length=4096)


class LocationSharingSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()
