# services/booking-service/src/apps/api/urls.py
"""
Scheduling API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    BookingViewSet,
    AvailableSlotsView,
    AvailabilityCalendarView,
    QuoteView,
    ListingAvailabilityView,
)

app_name = 'api'

router = DefaultRouter()
router.register(r'bookings', BookingViewSet, basename='booking')

urlpatterns = [
    path('', include(router.urls)),

    # Listing queries and declarations
    path('listings/<uuid:listing_id>/slots/', AvailableSlotsView.as_view(), name='listing-slots'),
    path('listings/<uuid:listing_id>/calendar/', AvailabilityCalendarView.as_view(), name='listing-calendar'),
    path('listings/<uuid:listing_id>/quote/', QuoteView.as_view(), name='listing-quote'),
    path('listings/<uuid:listing_id>/availability/', ListingAvailabilityView.as_view(), name='listing-availability'),
]
