from __future__ import annotations

from django.db import models

from apps.tours.constants import EVENT_STATUS_CHOICES, EVENT_TYPE_CHOICES, TOUR_ROLE_CHOICES, TOUR_STATUS_CHOICES


class Venue(models.Model):
    venue_id = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)
    city = models.CharField(max_length=255, blank=True, default="")
    created_by = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)


class Tour(models.Model):
    tour_id = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=32, choices=TOUR_STATUS_CHOICES, default="planning")
    created_by = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)


class TourMember(models.Model):
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="members")
    user_id = models.CharField(max_length=255)
    tour_role = models.CharField(max_length=32, choices=TOUR_ROLE_CHOICES)
    permissions = models.JSONField(default=list)
    granted_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tour", "user_id"], name="uq_tour_member_tour_user"),
        ]


class Event(models.Model):
    event_id = models.CharField(max_length=128, unique=True)
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="events")
    event_type = models.CharField(max_length=32, choices=EVENT_TYPE_CHOICES)
    title = models.CharField(max_length=255)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    venue = models.ForeignKey(Venue, null=True, blank=True, on_delete=models.SET_NULL, related_name="events")
    status = models.CharField(max_length=32, choices=EVENT_STATUS_CHOICES, default="pending")
    notes = models.TextField(blank=True, default="")
    created_by = models.CharField(max_length=255)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["tour", "start_at"], name="ix_event_tour_start"),
            models.Index(fields=["tour", "event_type"], name="ix_event_tour_type"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(end_at__gte=models.F("start_at")), name="ck_event_end_after_start"),
        ]
