from __future__ import annotations

from django.urls import include, path

from apps.core import api as core_api

urlpatterns = [
    path("api/v1/", include("apps.tours.urls")),
    path("api/v1/health/live", core_api.health_live, name="health-live"),
    path("api/v1/health/ready", core_api.health_ready, name="health-ready"),
    path("api/v1/health", core_api.health, name="health"),
    path("api/v1/metrics", core_api.metrics_payload, name="metrics"),
]
