from datetime import timedelta

from django.db.models import Avg, Count, Q
from django.utils import timezone

from app.moderation.domain.enums import ModerationAction
from app.moderation.models import AuditRecord

WINDOWS = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


class ModerationStatsService:
    @staticmethod
    def summary(window: str = "day", now=None) -> dict:
        """Agregados das moderações da janela (``day``, ``week`` ou ``month``)."""
        now = now or timezone.now()
        since = now - WINDOWS[window]
        records = AuditRecord.objects.filter(kind=AuditRecord.Kind.MODERATION, created_at__gte=since)

        totals = records.aggregate(
            total=Count("id"),
            approved=Count("id", filter=Q(action=ModerationAction.APPROVED)),
            flagged=Count("id", filter=Q(action=ModerationAction.FLAGGED)),
            blocked=Count("id", filter=Q(action=ModerationAction.BLOCKED)),
            degraded=Count("id", filter=Q(degraded=True)),
            average_confidence=Avg("confidence", filter=~Q(action=ModerationAction.APPROVED)),
        )

        top_categories = (
            records.exclude(primary_category="")
            .values("primary_category")
            .annotate(total=Count("id"))
            .order_by("-total", "primary_category")[:5]
        )

        return {
            "window": window,
            "since": since.isoformat(),
            **totals,
            "average_confidence": round(totals["average_confidence"] or 0.0, 4),
            "top_categories": [{"category": row["primary_category"], "total": row["total"]} for row in top_categories],
            "pending_review": AuditRecord.objects.pending_review().count(),
        }
