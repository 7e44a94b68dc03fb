from __future__ import annotations

from django.urls import path

from apps.tours import views

urlpatterns = [
    path("tours", views.tour_collection_endpoint, name="api-tours-collection"),
    path("tours/<str:tour_id>", views.tour_detail_endpoint, name="api-tours-detail"),
    path("tours/<str:tour_id>/members", views.tour_members_endpoint, name="api-tour-members"),
    path(
        "tours/<str:tour_id>/members/<str:user_id>",
        views.tour_member_detail_endpoint,
        name="api-tour-member-detail",
    ),
    path("tours/<str:tour_id>/events", views.tour_events_endpoint, name="api-tour-events"),
    path("tours/<str:tour_id>/conflicts", views.tour_conflicts_endpoint, name="api-tour-conflicts"),
    path("events/<str:event_id>", views.event_detail_endpoint, name="api-event-detail"),
    path("events/<str:event_id>/next-gap", views.event_next_gap_endpoint, name="api-event-next-gap"),
    path("venues", views.venue_collection_endpoint, name="api-venues-collection"),
    path("venues/<str:venue_id>", views.venue_detail_endpoint, name="api-venue-detail"),
]
