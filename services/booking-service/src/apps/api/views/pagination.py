# services/booking-service/src/apps/api/views/pagination.py
"""
API Pagination
"""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page-number pagination for booking lists."""

    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100
