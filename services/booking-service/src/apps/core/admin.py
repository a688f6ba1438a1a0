# services/booking-service/src/apps/core/admin.py
from django.contrib import admin

from .models import AvailabilityPeriod, Booking, Listing


class AvailabilityPeriodInline(admin.TabularInline):
    model = AvailabilityPeriod
    extra = 0
    fields = ['start_date', 'end_date', 'availability_type', 'reason', 'declared_at']
    readonly_fields = ['declared_at']


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'kind', 'provider_id', 'booking_enabled', 'auto_confirm']
    list_filter = ['kind', 'booking_enabled', 'auto_confirm']
    search_fields = ['title', 'provider_id']
    inlines = [AvailabilityPeriodInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['booking_number', 'listing', 'customer_display', 'status', 'start_time', 'end_time', 'price']
    list_filter = ['status', 'listing__kind']
    search_fields = ['booking_number', 'guest_name', 'guest_email']
    readonly_fields = ['booking_number', 'start_time', 'end_time', 'created_at', 'updated_at']
