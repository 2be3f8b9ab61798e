from django.urls import include, path
from rest_framework.routers import DefaultRouter

from app.moderation.api.views import (
    AuditRecordViewSet,
    ModerationStatsView,
    ReviewQueueViewSet,
    ViolationRuleViewSet,
)

router = DefaultRouter()
router.register(r"records", AuditRecordViewSet, basename="audit-record")
router.register(r"review-queue", ReviewQueueViewSet, basename="review-queue")
router.register(r"rules", ViolationRuleViewSet, basename="violation-rule")

urlpatterns = [
    path("stats/", ModerationStatsView.as_view(), name="moderation-stats"),
    path("", include(router.urls)),
]
