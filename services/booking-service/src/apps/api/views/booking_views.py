# services/booking-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Booking proposals and lifecycle actions.
"""

import logging

from rest_framework import viewsets, mixins, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import Booking
from apps.core.services import build_scheduling_service
from apps.core.services.records import Actor, CustomerRef, Frequency, RecurrencePattern
from apps.api.serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    RecurringBookingCreateSerializer,
    BookingTransitionSerializer,
)
from .filters import BookingFilter
from .pagination import StandardResultsSetPagination
from .responses import rejection_response

logger = logging.getLogger(__name__)


def request_actor(request) -> Actor:
    return Actor(getattr(request, 'actor_role', None) or Actor.CUSTOMER.value)


def customer_from(data) -> CustomerRef:
    return CustomerRef(
        user_id=data.get('customer_id'),
        guest_name=data.get('guest_name', ''),
        guest_email=data.get('guest_email', ''),
        guest_phone=data.get('guest_phone', ''),
    )


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for bookings.

    Bookings are created through the scheduling engine and change only
    through lifecycle actions; there is no update or delete.
    """

    queryset = Booking.objects.select_related('listing')
    serializer_class = BookingSerializer
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = BookingFilter
    search_fields = ['booking_number', 'guest_name', 'guest_email']
    ordering_fields = ['start_time', 'created_at', 'booking_number', 'status']
    ordering = ['start_time']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.scheduling_service = build_scheduling_service()

    def get_serializer_class(self):
        if self.action == 'list':
            return BookingListSerializer
        return BookingSerializer

    def _booking_data(self, booking_id):
        return BookingSerializer(Booking.objects.select_related('listing').get(pk=booking_id)).data

    def create(self, request, *args, **kwargs):
        """Propose a booking."""
        serializer = BookingCreateSerializer(
            data=request.data,
            context={'actor_id': getattr(request, 'actor_id', None)}
        )
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = self.scheduling_service.propose_booking(
            listing_id=data['listing'],
            requested=data['interval'],
            customer=customer_from(data),
            service_option=data.get('service_option') or None,
        )
        if not outcome.ok:
            return rejection_response(outcome, request)

        return Response(self._booking_data(outcome.booking.id), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def recurring(self, request):
        """
        Propose a recurring booking.

        Occurrences are committed in order until one is rejected; the
        response lists what was committed and why it stopped.
        """
        serializer = RecurringBookingCreateSerializer(
            data=request.data,
            context={'actor_id': getattr(request, 'actor_id', None)}
        )
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.scheduling_service.propose_recurring_booking(
            listing_id=data['listing'],
            template=data['interval'],
            pattern=RecurrencePattern(
                frequency=Frequency(data['frequency']),
                until=data.get('until'),
                max_occurrences=data.get('max_occurrences'),
            ),
            customer=customer_from(data),
            service_option=data.get('service_option') or None,
        )

        if not result.committed:
            return rejection_response(result.rejected, request)

        rejected = None
        if result.rejected is not None:
            rejected = rejection_response(result.rejected, request).data['error']

        bookings = Booking.objects.select_related('listing').filter(
            pk__in=[booking.id for booking in result.committed]
        ).order_by('start_time')

        return Response({
            'recurrence_group_id': result.committed[0].recurrence_group_id,
            'planned': result.planned,
            'committed': BookingListSerializer(bookings, many=True).data,
            'is_complete': result.is_complete,
            'rejected': rejected,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a booking."""
        serializer = BookingTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = self.scheduling_service.cancel_booking(
            pk,
            request_actor(request),
            reason=serializer.validated_data['reason']
        )
        return self._transition_response(outcome, request)

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """Confirm a pending booking."""
        outcome = self.scheduling_service.confirm_booking(pk, request_actor(request))
        return self._transition_response(outcome, request)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Complete a confirmed booking that has ended."""
        outcome = self.scheduling_service.complete_booking(pk, request_actor(request))
        return self._transition_response(outcome, request)

    @action(detail=True, methods=['post'], url_path='no-show')
    def no_show(self, request, pk=None):
        """Record that the customer did not attend."""
        outcome = self.scheduling_service.mark_no_show(pk, request_actor(request))
        return self._transition_response(outcome, request)

    def _transition_response(self, outcome, request) -> Response:
        if not outcome.ok:
            return rejection_response(outcome, request)
        return Response(self._booking_data(outcome.booking.id))
