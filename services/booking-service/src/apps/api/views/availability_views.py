# services/booking-service/src/apps/api/views/availability_views.py
"""
Availability API Views

Slot and calendar queries, price quotes and provider declarations for a
single listing.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.services import build_scheduling_service
from apps.core.services.exceptions import SchedulingError
from apps.core.services.records import AvailabilityType
from apps.api.serializers import (
    AvailabilityDeclareSerializer,
    CalendarQuerySerializer,
    PeriodSerializer,
    QuoteQuerySerializer,
    SlotQuerySerializer,
    TimeSlotSerializer,
)
from shared.common.exceptions import ForbiddenException
from .responses import rejection_response

logger = logging.getLogger(__name__)


class SchedulingAPIView(APIView):
    """Base view holding a scheduling service."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.scheduling_service = build_scheduling_service()


class AvailableSlotsView(SchedulingAPIView):
    """
    Slots for one day of a slot-based listing.

    Query parameters:
    - date: Day to list (required)
    - option: Service option name
    """

    def get(self, request, listing_id):
        serializer = SlotQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        day = serializer.validated_data['date']

        try:
            slots = self.scheduling_service.compute_available_slots(
                listing_id,
                day,
                serializer.validated_data['option'] or None
            )
        except SchedulingError as e:
            return rejection_response(e, request)

        return Response({
            'listing_id': str(listing_id),
            'date': day.isoformat(),
            'slots': TimeSlotSerializer(slots, many=True).data,
            'available_count': sum(1 for slot in slots if slot.is_available),
        })


class AvailabilityCalendarView(SchedulingAPIView):
    """
    Calendar over an inclusive date range.

    Slot-based listings return each day's slots; rentals return each day's
    status (available, blocked, unavailable, booked or past).
    """

    def get(self, request, listing_id):
        serializer = CalendarQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            listing = self.scheduling_service.listings.get_listing(listing_id)
            if listing.is_range_based:
                days = self.scheduling_service.rental_calendar(listing_id, data['start'], data['end'])
                calendar = {day.isoformat(): day_status for day, day_status in days.items()}
            else:
                days = self.scheduling_service.availability_calendar(
                    listing_id, data['start'], data['end'], data['option'] or None
                )
                calendar = {
                    day.isoformat(): TimeSlotSerializer(slots, many=True).data
                    for day, slots in days.items()
                }
        except SchedulingError as e:
            return rejection_response(e, request)

        return Response({
            'listing_id': str(listing_id),
            'kind': listing.kind.value,
            'start': data['start'].isoformat(),
            'end': data['end'].isoformat(),
            'days': calendar,
        })


class QuoteView(SchedulingAPIView):
    """Price for an interval without checking availability."""

    def get(self, request, listing_id):
        serializer = QuoteQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            price = self.scheduling_service.quote(listing_id, data['interval'], data['option'] or None)
        except SchedulingError as e:
            return rejection_response(e, request)

        return Response({'listing_id': str(listing_id), 'price': price.to_dict()})


class ListingAvailabilityView(SchedulingAPIView):
    """
    Declared availability periods.

    GET lists the current periods; POST stores a declaration, replacing
    every period it intersects. Declarations require the provider role.
    """

    def get(self, request, listing_id):
        try:
            periods = self.scheduling_service.list_periods(listing_id)
        except SchedulingError as e:
            return rejection_response(e, request)

        return Response({
            'listing_id': str(listing_id),
            'periods': PeriodSerializer(periods, many=True).data,
        })

    def post(self, request, listing_id):
        if getattr(request, 'actor_role', None) != 'provider':
            raise ForbiddenException('Only the provider can declare availability')

        serializer = AvailabilityDeclareSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            periods = self.scheduling_service.declare_availability(
                listing_id,
                data['start_date'],
                data['end_date'],
                AvailabilityType(data['availability_type']),
                reason=data['reason'],
            )
        except SchedulingError as e:
            return rejection_response(e, request)

        return Response({
            'listing_id': str(listing_id),
            'periods': PeriodSerializer(periods, many=True).data,
        }, status=status.HTTP_201_CREATED)
