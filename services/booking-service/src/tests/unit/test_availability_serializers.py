# services/booking-service/src/tests/unit/test_availability_serializers.py
"""
Unit Tests for Availability Serializers
"""

from apps.api.serializers import AvailabilityDeclareSerializer


class TestAvailabilityDeclareSerializer:

    def test_valid_declaration(self):
        serializer = AvailabilityDeclareSerializer(data={
            'start_date': '2024-06-01',
            'end_date': '2024-06-30',
            'availability_type': 'blocked',
        })

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['availability_type'] == 'blocked'
        assert serializer.validated_data['reason'] == ''

    def test_unknown_type(self):
        serializer = AvailabilityDeclareSerializer(data={
            'start_date': '2024-06-01',
            'end_date': '2024-06-30',
            'availability_type': 'maybe',
        })

        assert not serializer.is_valid()
        assert 'availability_type' in serializer.errors

    def test_end_before_start(self):
        serializer = AvailabilityDeclareSerializer(data={
            'start_date': '2024-06-30',
            'end_date': '2024-06-01',
            'availability_type': 'available',
        })

        assert not serializer.is_valid()
        assert 'end_date' in serializer.errors
