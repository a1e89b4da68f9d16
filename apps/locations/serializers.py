"""
Serializers for the Locations app.
"""
from rest_framework import serializers


class LocationUpdateSerializer(serializers.Serializer):
    """
    A single location sample from the device.
    """
    latitude = serializers.FloatField(min_value=-90.0, max_value=90.0)
    longitude = serializers.FloatField(min_value=-180.0, max_value=180.0)
    accuracy = serializers.FloatField(min_value=0.0, required=False, default=0.0)
    altitude = serializers.FloatField(required=False, default=0.0)
    speed = serializers.FloatField(min_value=0.0, required=False, default=0.0)
    bearing = serializers.FloatField(min_value=0.0, max_value=360.0, required=False, default=0.0)


class UserLocationSerializer(serializers.Serializer):
    user_id = serializers.CharField(read_only=True)
    latitude = serializers.FloatField(read_only=True)
    longitude = serializers.FloatField(read_only=True)
    accuracy = serializers.FloatField(read_only=True)
    altitude = serializers.FloatField(read_only=True)
    speed = serializers.FloatField(read_only=True)
    bearing = serializers.FloatField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True, allow_null=True)
