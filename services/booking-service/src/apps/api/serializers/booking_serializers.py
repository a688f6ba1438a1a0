# services/booking-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Serializers for booking creation, listing and lifecycle actions.
"""

from rest_framework import serializers

from apps.core.models import Booking
from apps.core.services.intervals import TimeInterval
from apps.core.services.recurrence import MAX_OCCURRENCES


class BookingSerializer(serializers.ModelSerializer):
    """Full booking representation."""

    status_display = serializers.CharField(source='get_status_display', read_only=True)
    is_guest = serializers.BooleanField(read_only=True)
    listing_kind = serializers.CharField(source='listing.kind', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'booking_number',
            'listing', 'listing_kind', 'provider_id',
            'customer_id', 'is_guest', 'guest_name', 'guest_email', 'guest_phone',
            'service_name',
            'start_time', 'end_time', 'start_date', 'end_date', 'duration_minutes',
            'status', 'status_display',
            'price', 'currency',
            'recurrence_group_id', 'recurrence_sequence', 'recurrence_pattern',
            'cancelled_by', 'cancellation_reason', 'is_late_cancellation',
            'confirmed_at', 'cancelled_at', 'completed_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BookingListSerializer(BookingSerializer):
    """Compact serializer for booking lists."""

    class Meta(BookingSerializer.Meta):
        fields = [
            'id', 'booking_number', 'listing',
            'customer_id', 'is_guest', 'guest_name',
            'start_time', 'end_time', 'start_date', 'end_date',
            'status', 'status_display', 'price', 'currency',
            'recurrence_group_id', 'recurrence_sequence',
        ]


class IntervalFieldsMixin:
    """Reads either a start/end time pair or a start/end date pair."""

    def validate_interval(self, data):
        has_times = data.get('start_time') is not None or data.get('end_time') is not None
        has_dates = data.get('start_date') is not None or data.get('end_date') is not None

        if has_times and has_dates:
            raise serializers.ValidationError(
                'Provide either start_time/end_time or start_date/end_date, not both'
            )

        if has_times:
            if data.get('start_time') is None or data.get('end_time') is None:
                raise serializers.ValidationError('Both start_time and end_time are required')
            if data['end_time'] <= data['start_time']:
                raise serializers.ValidationError({'end_time': 'End time must be after start time'})
            return TimeInterval(data['start_time'], data['end_time'])

        if has_dates:
            if data.get('start_date') is None or data.get('end_date') is None:
                raise serializers.ValidationError('Both start_date and end_date are required')
            if data['end_date'] < data['start_date']:
                raise serializers.ValidationError({'end_date': 'End date must not be before start date'})
            return TimeInterval.for_days(data['start_date'], data['end_date'])

        raise serializers.ValidationError('A start_time/end_time or start_date/end_date pair is required')


class BookingCreateSerializer(IntervalFieldsMixin, serializers.Serializer):
    """
    Booking request.

    The customer is the caller (X-User-ID) or an explicit customer_id;
    without either, guest_name and guest_email are required.
    """

    listing = serializers.UUIDField()
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    service_option = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    customer_id = serializers.UUIDField(required=False, allow_null=True)
    guest_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    guest_email = serializers.EmailField(required=False, allow_blank=True, default='')
    guest_phone = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')

    def validate(self, data):
        data['interval'] = self.validate_interval(data)

        has_guest = any(data.get(f) for f in ('guest_name', 'guest_email', 'guest_phone'))
        customer_id = data.get('customer_id')

        if customer_id and has_guest:
            raise serializers.ValidationError(
                'Provide either customer_id or guest details, not both'
            )

        if not customer_id and not has_guest:
            customer_id = self.context.get('actor_id')

        if not customer_id:
            errors = {}
            if not data.get('guest_name'):
                errors['guest_name'] = 'Guest name is required for guest bookings'
            if not data.get('guest_email'):
                errors['guest_email'] = 'Guest email is required for guest bookings'
            if errors:
                raise serializers.ValidationError(errors)

        data['customer_id'] = customer_id
        return data


class RecurringBookingCreateSerializer(BookingCreateSerializer):
    """Recurring booking request; the interval is the first occurrence."""

    frequency = serializers.ChoiceField(choices=Booking.RecurrencePattern.choices)
    until = serializers.DateField(required=False, allow_null=True)
    max_occurrences = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=1,
        max_value=MAX_OCCURRENCES
    )

    def validate(self, data):
        data = super().validate(data)
        if data.get('until') is None and data.get('max_occurrences') is None:
            raise serializers.ValidationError('Either until or max_occurrences is required')
        return data


class BookingTransitionSerializer(serializers.Serializer):
    """Body of a lifecycle action."""

    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class QuoteQuerySerializer(IntervalFieldsMixin, serializers.Serializer):
    """Query parameters for a price quote."""

    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    option = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, data):
        data['interval'] = self.validate_interval(data)
        return data
