# services/booking-service/src/apps/api/serializers/availability_serializers.py
"""
Availability Serializers

Serializers for availability declarations, slot queries and calendars.
"""

from rest_framework import serializers

from apps.core.models import AvailabilityPeriod


class PeriodSerializer(serializers.Serializer):
    """Engine period returned by a declaration."""

    id = serializers.CharField(read_only=True)
    start_date = serializers.DateField(read_only=True)
    end_date = serializers.DateField(read_only=True)
    availability_type = serializers.SerializerMethodField()
    reason = serializers.CharField(read_only=True)
    declared_at = serializers.DateTimeField(read_only=True)

    def get_availability_type(self, obj) -> str:
        return obj.availability_type.value


class AvailabilityDeclareSerializer(serializers.Serializer):
    """Provider declaration over an inclusive range of days."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    availability_type = serializers.ChoiceField(
        choices=AvailabilityPeriod.AvailabilityType.choices
    )
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate(self, data):
        if data['end_date'] < data['start_date']:
            raise serializers.ValidationError({
                'end_date': 'End date must not be before start date'
            })
        return data


class SlotQuerySerializer(serializers.Serializer):
    """Query parameters for a day's slots."""

    date = serializers.DateField()
    option = serializers.CharField(required=False, allow_blank=True, default='')


class CalendarQuerySerializer(serializers.Serializer):
    """Query parameters for a calendar range."""

    start = serializers.DateField()
    end = serializers.DateField()
    option = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        if data['end'] < data['start']:
            raise serializers.ValidationError({'end': 'End must not be before start'})
        return data


class TimeSlotSerializer(serializers.Serializer):
    """Computed slot; never stored."""

    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField()
    is_available = serializers.BooleanField()
    price = serializers.SerializerMethodField()
    service_option = serializers.CharField(allow_null=True)
    unavailable_reason = serializers.SerializerMethodField()

    def get_price(self, obj):
        return obj.price.to_dict() if obj.price else None

    def get_unavailable_reason(self, obj):
        return obj.unavailable_reason.value if obj.unavailable_reason else None
