"""Request body validation for the tour and scheduling endpoints."""

from rest_framework import serializers

from apps.core.contracts.policy import Capability, TourRole
from apps.core.contracts.resources import EVENT_STATUSES, EVENT_TYPES, TOUR_STATUSES

IDENTIFIER_PATTERN = r"^[A-Za-z0-9._:-]{1,128}$"


class TourInputSerializer(serializers.Serializer):
    tour_id = serializers.RegexField(IDENTIFIER_PATTERN, required=False)
    name = serializers.CharField(max_length=255)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=TOUR_STATUSES, required=False, default="planning")

    def validate(self, data):
        """End date must not precede the start date."""
        start_date = data.get("start_date")
        end_date = data.get("end_date")
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({"end_date": "End date must be after or equal to start date"})
        return data


class MembershipInputSerializer(serializers.Serializer):
    tour_role = serializers.ChoiceField(choices=[role.value for role in TourRole])
    permissions = serializers.ListField(
        child=serializers.ChoiceField(choices=[item.value for item in Capability]),
        required=False,
        allow_empty=True,
        default=list,
    )


class EventInputSerializer(serializers.Serializer):
    event_id = serializers.RegexField(IDENTIFIER_PATTERN, required=False)
    event_type = serializers.ChoiceField(choices=EVENT_TYPES)
    title = serializers.CharField(max_length=255)
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    venue_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=EVENT_STATUSES, required=False, default="pending")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class EventUpdateSerializer(serializers.Serializer):
    event_type = serializers.ChoiceField(choices=EVENT_TYPES, required=False)
    title = serializers.CharField(max_length=255, required=False)
    start_at = serializers.DateTimeField(required=False)
    end_at = serializers.DateTimeField(required=False)
    venue_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=EVENT_STATUSES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    version = serializers.IntegerField(required=False, min_value=1)


class ConflictCheckSerializer(serializers.Serializer):
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    exclude_event_id = serializers.CharField(required=False, allow_blank=True, default="")


class VenueInputSerializer(serializers.Serializer):
    venue_id = serializers.RegexField(IDENTIFIER_PATTERN, required=False)
    name = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class VenueUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    city = serializers.CharField(max_length=255, required=False, allow_blank=True)
