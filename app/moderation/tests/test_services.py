import threading
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone
from model_bakery import baker

from app.community.models import Content
from app.moderation.domain.enums import (
    AccountStatus,
    AuthorRole,
    CommunityVisibility,
    ContentType,
    EnforcementAction,
    ModerationAction,
    ModerationSource,
    ReviewPriority,
)
from app.moderation.domain.results import BatchItem, ModerationContext, ModerationResult
from app.moderation.exceptions import (
    EnforcementWriteError,
    ImmutableAuditRecordError,
    InvalidRuleError,
    ReviewStateError,
)
from app.moderation.infrastructure.local import LocalDictionaryClassifier
from app.moderation.models import AuditRecord, EnforcementConfig, ViolationRuleRecord
from app.moderation.services.audit import AuditLogger
from app.moderation.services.catalog import RuleCatalogService
from app.moderation.services.moderator import ModerationService, is_batch_error
from app.moderation.services.pipeline import ModerationPipeline
from app.moderation.services.review import OVERTURN, UPHOLD, ReviewService
from app.moderation.services.stats import ModerationStatsService

PUBLIC_POST = ModerationContext(
    content_type=ContentType.POST, author_role=AuthorRole.CLIENT, community_visibility=CommunityVisibility.PUBLIC
)


@pytest.fixture
def pending_content(user, community):
    def make(body: str, content_type: str = Content.Type.POST) -> Content:
        return baker.make(
            Content,
            community=community,
            author=user,
            body=body,
            content_type=content_type,
            status=Content.Status.PENDING,
        )

    return make


@pytest.fixture
def broadcast():
    with patch("app.moderation.services.pipeline.BroadcastService") as mock_broadcast:
        yield mock_broadcast


@pytest.mark.integration
@pytest.mark.django_db
class TestModerationService:
    def test_empty_content_is_approved(self):
        verdict = ModerationService.moderate("   ", PUBLIC_POST)

        assert verdict.action == ModerationAction.APPROVED
        assert verdict.reason == "Empty content provided"

    def test_content_too_long_is_blocked_without_categories(self):
        verdict = ModerationService.moderate("a" * 10_001, PUBLIC_POST)

        assert verdict.action == ModerationAction.BLOCKED
        assert verdict.reason.startswith("CONTENT_TOO_LONG")
        assert verdict.confidence == 1.0
        assert verdict.categories == ()
        assert verdict.appealable is True

    def test_appearance_comment_is_flagged_for_review(self):
        verdict = ModerationService.moderate("You have such a sexy body!!", PUBLIC_POST)

        assert verdict.action == ModerationAction.FLAGGED
        assert verdict.requires_human_review is True
        assert verdict.review_priority == ReviewPriority.HIGH
        assert verdict.primary.rule_id == "INAPPROPRIATE_PERSONAL_COMMENTS"
        assert verdict.primary.matches == ("sexy", "sexy body")
        assert verdict.degraded is False

    def test_off_platform_contact_is_blocked(self):
        verdict = ModerationService.moderate("DM me, my number is 555-123-4567", PUBLIC_POST)

        assert verdict.action == ModerationAction.BLOCKED
        assert verdict.severity == 5
        assert verdict.confidence == 1.0
        assert verdict.suggested_account_action == EnforcementAction.SUSPEND_3D
        assert verdict.reason.startswith("Content blocked: ")

    def test_encouraging_fitness_content_is_approved(self):
        verdict = ModerationService.moderate("Great squat depth today, keep pushing your goals!", PUBLIC_POST)

        assert verdict.action == ModerationAction.APPROVED
        assert verdict.source == ModerationSource.COMBINED
        assert verdict.categories == ()

    def test_classifier_violation_is_composed(self):
        verdict = ModerationService.moderate("Você é um idiota", PUBLIC_POST)

        assert verdict.action == ModerationAction.FLAGGED
        assert verdict.source == ModerationSource.EXTERNAL_CLASSIFIER
        assert verdict.primary.rule_id == "EXTERNAL:harassment"

    def test_classifier_error_degrades_to_custom_rules(self, monkeypatch):
        def broken(self, content):
            raise RuntimeError("classifier down")

        monkeypatch.setattr(LocalDictionaryClassifier, "classify", broken)

        verdict = ModerationService.moderate("DM me, my number is 555-123-4567", PUBLIC_POST)

        assert verdict.degraded is True
        assert verdict.source == ModerationSource.CUSTOM_RULES
        assert verdict.action == ModerationAction.BLOCKED

    def test_classifier_timeout_degrades(self, settings, monkeypatch):
        settings.MODERATION_CLASSIFIER_TIMEOUT = 0.05
        release = threading.Event()

        def slow(self, content):
            release.wait(2)
            return {}

        monkeypatch.setattr(LocalDictionaryClassifier, "classify", slow)

        try:
            verdict = ModerationService.moderate("Você é um idiota", PUBLIC_POST)
        finally:
            release.set()

        assert verdict.degraded is True
        assert verdict.action == ModerationAction.APPROVED

    def test_unknown_provider_falls_back_to_local(self, settings):
        settings.MODERATION_CLASSIFIER_PROVIDER = "openai"

        verdict = ModerationService.moderate("Você é um idiota", PUBLIC_POST)

        assert verdict.primary.rule_id == "EXTERNAL:harassment"

    def test_moderation_is_deterministic(self):
        first = ModerationService.moderate("Buy now! Discount code inside", PUBLIC_POST)
        second = ModerationService.moderate("Buy now! Discount code inside", PUBLIC_POST)

        assert first == second


def broken_classifier(self, content):
    raise RuntimeError("classifier down")


@pytest.mark.integration
@pytest.mark.django_db
class TestVerdictCache:
    def test_repeated_content_is_served_from_cache(self):
        first = ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")

        with patch.object(LocalDictionaryClassifier, "classify") as mock_classify:
            second = ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")

        mock_classify.assert_not_called()
        assert second == first

    def test_cache_is_keyed_by_author(self, monkeypatch):
        ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")
        monkeypatch.setattr(LocalDictionaryClassifier, "classify", broken_classifier)

        verdict = ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-2")

        assert verdict.degraded is True

    def test_cache_is_keyed_by_context(self, monkeypatch):
        ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")
        monkeypatch.setattr(LocalDictionaryClassifier, "classify", broken_classifier)
        comment = ModerationContext(
            content_type=ContentType.COMMENT,
            author_role=AuthorRole.CLIENT,
            community_visibility=CommunityVisibility.PUBLIC,
        )

        assert ModerationService.moderate("Você é um idiota", comment, "author-1").degraded is True

    def test_catalog_reload_changes_cache_version(self):
        before = RuleCatalogService.version()

        RuleCatalogService.invalidate()

        assert RuleCatalogService.version() != before

    def test_disabled_rule_is_not_served_from_cache(self):
        RuleCatalogService.seed_defaults()
        first = ModerationService.moderate("You have such a sexy body!!", PUBLIC_POST, "author-1")

        ViolationRuleRecord.objects.get(rule_id="INAPPROPRIATE_PERSONAL_COMMENTS").delete()

        second = ModerationService.moderate("You have such a sexy body!!", PUBLIC_POST, "author-1")
        assert first.action == ModerationAction.FLAGGED
        assert second.action == ModerationAction.APPROVED

    def test_degraded_verdict_is_not_cached(self):
        with patch.object(LocalDictionaryClassifier, "classify", broken_classifier):
            degraded = ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")

        verdict = ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")

        assert degraded.degraded is True
        assert verdict.degraded is False
        assert verdict.primary.rule_id == "EXTERNAL:harassment"

    def test_zero_timeout_disables_cache(self, settings, monkeypatch):
        settings.MODERATION_VERDICT_CACHE_TIMEOUT = 0
        ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1")
        monkeypatch.setattr(LocalDictionaryClassifier, "classify", broken_classifier)

        assert ModerationService.moderate("Você é um idiota", PUBLIC_POST, "author-1").degraded is True


@pytest.mark.integration
@pytest.mark.django_db
class TestBatchModeration:
    @pytest.fixture(autouse=True)
    def no_pause(self, settings):
        settings.MODERATION_BATCH_PAUSE = 0

    def _items(self, *bodies: str) -> list[BatchItem]:
        return [BatchItem(id=f"item-{i}", content=body, context=PUBLIC_POST) for i, body in enumerate(bodies)]

    def test_each_item_gets_a_verdict_in_order(self):
        items = self._items("Great squat depth today!", "DM me, my number is 555-123-4567", "Você é um idiota")

        results = ModerationService.moderate_batch(items)

        assert list(results) == ["item-0", "item-1", "item-2"]
        assert results["item-0"].action == ModerationAction.APPROVED
        assert results["item-1"].action == ModerationAction.BLOCKED
        assert results["item-2"].action == ModerationAction.FLAGGED

    def test_items_are_processed_in_chunks(self, settings):
        settings.MODERATION_BATCH_SIZE = 2

        with patch("app.moderation.services.moderator.time.sleep") as mock_sleep:
            results = ModerationService.moderate_batch(self._items(*["Bom treino"] * 5))

        assert len(results) == 5
        assert mock_sleep.call_count == 2

    def test_failed_item_is_blocked_as_batch_error(self):
        def moderate(content, context, author_id=None, catalog=None, version=None):
            if content == "boom":
                raise RuntimeError("unexpected")
            return ModerationResult.approved("Content approved")

        with patch.object(ModerationService, "_moderate", side_effect=moderate):
            results = ModerationService.moderate_batch(self._items("Bom treino", "boom"))

        failed = results["item-1"]
        assert results["item-0"].is_approved
        assert failed.action == ModerationAction.BLOCKED
        assert failed.reason == "BATCH_ERROR: Batch moderation failed"
        assert failed.appealable is True
        assert failed.categories == ()
        assert is_batch_error(failed)

    def test_empty_batch(self):
        assert ModerationService.moderate_batch([]) == {}


@pytest.mark.integration
@pytest.mark.django_db
class TestRuleCatalogService:
    def test_defaults_are_used_without_records(self):
        catalog = RuleCatalogService.get_catalog()

        assert len(catalog) == 10

    def test_seed_defaults_is_idempotent(self):
        assert RuleCatalogService.seed_defaults() == 10
        assert RuleCatalogService.seed_defaults() == 0
        assert ViolationRuleRecord.objects.count() == 10

    def test_disabling_a_rule_reloads_catalog(self):
        RuleCatalogService.seed_defaults()
        assert ModerationService.moderate("You have such a sexy body!!", PUBLIC_POST).action == ModerationAction.FLAGGED

        rule = ViolationRuleRecord.objects.get(rule_id="INAPPROPRIATE_PERSONAL_COMMENTS")
        rule.enabled = False
        rule.save()

        verdict = ModerationService.moderate("You have such a sexy body!!", PUBLIC_POST)
        assert verdict.action == ModerationAction.APPROVED

    def test_invalid_record_is_rejected_on_load(self):
        ViolationRuleRecord.objects.bulk_create(
            [
                ViolationRuleRecord(
                    rule_id="BROKEN",
                    name="Broken",
                    category="SPAM",
                    severity=9,
                    base_confidence=0.5,
                    action=ModerationAction.FLAGGED,
                    patterns=["x"],
                )
            ]
        )

        with pytest.raises(InvalidRuleError):
            RuleCatalogService.get_catalog()

    def test_rule_stats_counts_primary_rule(self):
        baker.make(AuditRecord, kind=AuditRecord.Kind.MODERATION, action="FLAGGED", primary_rule="SUPPLEMENT_SPAM")
        baker.make(AuditRecord, kind=AuditRecord.Kind.REVIEW, action="FLAGGED", primary_rule="SUPPLEMENT_SPAM")

        stats = {row["rule_id"]: row["fired_count"] for row in RuleCatalogService.rule_stats()}

        assert stats["SUPPLEMENT_SPAM"] == 1
        assert stats["BODY_SHAMING"] == 0


@pytest.mark.integration
@pytest.mark.django_db
class TestAuditLogger:
    def test_record_persists_verdict(self, user):
        verdict = ModerationService.moderate("DM me, my number is 555-123-4567", PUBLIC_POST)

        record = AuditLogger.record(verdict, author_id=user.id, provider="local")

        assert record.kind == AuditRecord.Kind.MODERATION
        assert record.primary_rule == "UNSOLICITED_PERSONAL_ATTENTION"
        assert record.review_priority == ReviewPriority.HIGH
        assert record.raw_payload["verdict"]["action"] == ModerationAction.BLOCKED

    def test_records_are_immutable(self, user):
        record = AuditLogger.record(ModerationResult.approved("Content approved"), author_id=user.id)

        record.reason = "edited"
        with pytest.raises(ImmutableAuditRecordError):
            record.save()
        with pytest.raises(ImmutableAuditRecordError):
            record.delete()

    def test_write_failure_alerts_and_requeues(self, user):
        verdict = ModerationResult.approved("Content approved")

        with (
            patch.object(AuditLogger, "persist", side_effect=DatabaseError("disk full")),
            patch("app.moderation.tasks.persist_audit_record_task.delay") as mock_delay,
            patch("app.moderation.services.audit.logger") as mock_logger,
        ):
            record = AuditLogger.record(verdict, author_id=user.id)

        assert record is None
        mock_delay.assert_called_once()
        assert mock_delay.call_args[0][0]["author_id"] == str(user.id)
        event, kwargs = mock_logger.bind.return_value.error.call_args
        assert event == ("audit_write_failed",)
        assert kwargs["alert"] is True


@pytest.mark.integration
@pytest.mark.django_db
class TestModerationPipeline:
    def test_blocked_content_is_enforced_and_audited(self, user, pending_content, broadcast):
        content = pending_content("DM me, my number is 555-123-4567")

        verdict = ModerationPipeline.process(content.id)

        content.refresh_from_db()
        config = EnforcementConfig.objects.get(user=user)
        record = AuditRecord.objects.get(content=content)
        assert verdict.action == ModerationAction.BLOCKED
        assert content.status == Content.Status.BLOCKED
        assert config.status == AccountStatus.SUSPENDED
        assert config.reputation_score == 75
        assert record.enforcement_action == EnforcementAction.SUSPEND_3D
        assert record.reputation_delta == -25
        assert record.provider == "local"
        broadcast.notify_author_blocked.assert_called_once()
        broadcast.notify_enforcement.assert_called_once()
        broadcast.broadcast_content.assert_not_called()

    def test_flagged_content_waits_for_review(self, pending_content, broadcast):
        content = pending_content("You have such a sexy body!!", Content.Type.COMMENT)

        ModerationPipeline.process(content.id)

        content.refresh_from_db()
        assert content.status == Content.Status.UNDER_REVIEW
        assert AuditRecord.objects.pending_review().filter(content=content).exists()
        broadcast.notify_author_under_review.assert_called_once()

    def test_flagged_without_review_stays_visible_but_warns(self, user, pending_content, broadcast):
        content = pending_content("Anyone into crypto?")

        verdict = ModerationPipeline.process(content.id)

        content.refresh_from_db()
        assert verdict.action == ModerationAction.FLAGGED
        assert verdict.requires_human_review is False
        assert content.status == Content.Status.APPROVED
        assert EnforcementConfig.objects.get(user=user).warning_count == 1
        broadcast.broadcast_content.assert_called_once()

    def test_approved_content_is_broadcast(self, user, pending_content, broadcast):
        content = pending_content("Great squat depth today, keep pushing your goals!")

        ModerationPipeline.process(content.id)

        content.refresh_from_db()
        assert content.status == Content.Status.APPROVED
        assert not EnforcementConfig.objects.filter(user=user).exists()
        broadcast.broadcast_content.assert_called_once()

    def test_already_moderated_content_is_skipped(self, user, community, broadcast):
        content = baker.make(Content, community=community, author=user, body="oi", status=Content.Status.APPROVED)

        assert ModerationPipeline.process(content.id) is None
        assert not AuditRecord.objects.exists()

    def test_enforcement_failure_is_deferred(self, user, pending_content, broadcast):
        content = pending_content("DM me, my number is 555-123-4567")

        with (
            patch(
                "app.moderation.services.pipeline.EnforcementService.apply",
                side_effect=EnforcementWriteError("db down"),
            ),
            patch("app.moderation.tasks.apply_enforcement_task.delay") as mock_delay,
        ):
            ModerationPipeline.process(content.id)

        record = AuditRecord.objects.get(content=content)
        args = mock_delay.call_args[0]
        assert args[0] == str(user.id)
        assert args[1]["action"] == ModerationAction.BLOCKED
        assert args[2] == str(record.id)
        assert args[3] == str(content.id)
        assert record.enforcement_action == ""

    def test_process_batch_moderates_pending_contents(self, user, community, pending_content, broadcast):
        approved = pending_content("Great squat depth today!")
        blocked = pending_content("DM me, my number is 555-123-4567")
        done = baker.make(Content, community=community, author=user, body="Olá", status=Content.Status.APPROVED)

        summary = ModerationPipeline.process_batch([approved.id, blocked.id, done.id])

        approved.refresh_from_db()
        blocked.refresh_from_db()
        assert summary == {"moderated": 2, "skipped": 1, "requeued": 0}
        assert approved.status == Content.Status.APPROVED
        assert blocked.status == Content.Status.BLOCKED
        assert EnforcementConfig.objects.get(user=user).reputation_score < 100
        assert AuditRecord.objects.filter(kind=AuditRecord.Kind.MODERATION).count() == 2

    def test_batch_error_is_requeued_without_enforcement(self, user, pending_content, broadcast):
        content = pending_content("Bom treino")

        with (
            patch.object(ModerationService, "_moderate", side_effect=RuntimeError("unexpected")),
            patch("app.moderation.tasks.moderate_content_task.delay") as mock_delay,
        ):
            summary = ModerationPipeline.process_batch([content.id])

        content.refresh_from_db()
        assert summary == {"moderated": 0, "skipped": 0, "requeued": 1}
        assert content.status == Content.Status.PENDING
        assert not AuditRecord.objects.exists()
        assert not EnforcementConfig.objects.filter(user=user, reputation_score__lt=100).exists()
        mock_delay.assert_called_once_with(str(content.id))


@pytest.mark.integration
@pytest.mark.django_db
class TestReviewService:
    @pytest.fixture
    def flagged_record(self, pending_content, broadcast):
        content = pending_content("You have such a sexy body!!")
        ModerationPipeline.process(content.id)
        return AuditRecord.objects.get(content=content, kind=AuditRecord.Kind.MODERATION)

    def test_queue_is_ordered_by_priority(self, user, flagged_record):
        low = baker.make(
            AuditRecord,
            kind=AuditRecord.Kind.MODERATION,
            action=ModerationAction.FLAGGED,
            requires_human_review=True,
            review_priority=ReviewPriority.LOW,
        )

        assert list(ReviewService.queue()) == [flagged_record, low]

    def test_overturn_restores_content_and_reputation(self, user, admin_user, flagged_record):
        assert EnforcementConfig.objects.get(user=user).reputation_score == 80

        with patch("app.moderation.services.review.BroadcastService") as mock_broadcast:
            review = ReviewService.resolve(flagged_record.id, admin_user, OVERTURN, notes="contexto de elogio")

        flagged_record.content.refresh_from_db()
        assert review.kind == AuditRecord.Kind.REVIEW
        assert review.parent_id == flagged_record.id
        assert review.reviewer_id == admin_user.id
        assert review.action == ModerationAction.APPROVED
        assert flagged_record.content.status == Content.Status.APPROVED
        assert EnforcementConfig.objects.get(user=user).reputation_score == 100
        assert not ReviewService.queue().exists()
        mock_broadcast.broadcast_content.assert_called_once()

    def test_uphold_blocks_content(self, user, admin_user, flagged_record):
        with patch("app.moderation.services.review.BroadcastService") as mock_broadcast:
            ReviewService.resolve(flagged_record.id, admin_user, UPHOLD)

        flagged_record.content.refresh_from_db()
        assert flagged_record.content.status == Content.Status.BLOCKED
        assert EnforcementConfig.objects.get(user=user).reputation_score == 80
        mock_broadcast.notify_author_blocked.assert_called_once()

    def test_upheld_appeal_keeps_visible_flagged_content(self, user, admin_user, pending_content, broadcast):
        content = pending_content("Anyone into crypto?")
        ModerationPipeline.process(content.id)
        record = AuditRecord.objects.get(content=content, kind=AuditRecord.Kind.MODERATION)
        appeal = ReviewService.appeal(record.id, user, "Era sobre o preço dos suplementos")

        with patch("app.moderation.services.review.BroadcastService") as mock_broadcast:
            ReviewService.resolve(appeal.id, admin_user, UPHOLD)

        content.refresh_from_db()
        assert content.status == Content.Status.APPROVED
        mock_broadcast.notify_author_blocked.assert_not_called()

    def test_resolving_twice_fails(self, admin_user, flagged_record):
        with patch("app.moderation.services.review.BroadcastService"):
            ReviewService.resolve(flagged_record.id, admin_user, UPHOLD)

            with pytest.raises(ReviewStateError):
                ReviewService.resolve(flagged_record.id, admin_user, OVERTURN)

    def test_unknown_decision_fails(self, admin_user, flagged_record):
        with pytest.raises(ReviewStateError, match="desconhecida"):
            ReviewService.resolve(flagged_record.id, admin_user, "ESCALATE")

    def test_appeal_opens_review(self, user, flagged_record):
        appeal = ReviewService.appeal(flagged_record.id, user, "Era um elogio ao progresso do treino")

        assert appeal.kind == AuditRecord.Kind.APPEAL
        assert appeal.parent_id == flagged_record.id
        assert appeal.requires_human_review is True
        assert appeal.review_priority >= ReviewPriority.MEDIUM
        assert appeal in ReviewService.queue()

    def test_appeal_overturn_restores_reputation(self, user, admin_user, flagged_record):
        appeal = ReviewService.appeal(flagged_record.id, user, "Era um elogio")

        with patch("app.moderation.services.review.BroadcastService"):
            ReviewService.resolve(appeal.id, admin_user, OVERTURN)

        flagged_record.content.refresh_from_db()
        assert flagged_record.content.status == Content.Status.APPROVED
        assert EnforcementConfig.objects.get(user=user).reputation_score == 100

    def test_appeal_rules(self, user, member_user, flagged_record):
        with pytest.raises(ReviewStateError, match="autor"):
            ReviewService.appeal(flagged_record.id, member_user, "não é meu")

        ReviewService.appeal(flagged_record.id, user, "primeiro recurso")
        with pytest.raises(ReviewStateError, match="Já existe"):
            ReviewService.appeal(flagged_record.id, user, "segundo recurso")

    def test_approved_record_is_not_appealable(self, user):
        record = AuditLogger.record(ModerationResult.approved("Content approved"), author_id=user.id)

        with pytest.raises(ReviewStateError):
            ReviewService.appeal(record.id, user, "sem motivo")


@pytest.mark.integration
@pytest.mark.django_db
class TestModerationStatsService:
    def test_summary_aggregates_window(self):
        baker.make(AuditRecord, kind=AuditRecord.Kind.MODERATION, action=ModerationAction.APPROVED, confidence=0.0)
        baker.make(
            AuditRecord,
            kind=AuditRecord.Kind.MODERATION,
            action=ModerationAction.FLAGGED,
            confidence=0.6,
            primary_category="SPAM",
            degraded=True,
        )
        baker.make(
            AuditRecord,
            kind=AuditRecord.Kind.MODERATION,
            action=ModerationAction.BLOCKED,
            confidence=1.0,
            primary_category="HARASSMENT",
            requires_human_review=True,
        )
        baker.make(AuditRecord, kind=AuditRecord.Kind.REVIEW, action=ModerationAction.BLOCKED, confidence=1.0)

        summary = ModerationStatsService.summary("day")

        assert summary["total"] == 3
        assert summary["approved"] == 1
        assert summary["flagged"] == 1
        assert summary["blocked"] == 1
        assert summary["degraded"] == 1
        assert summary["average_confidence"] == 0.8
        assert {row["category"] for row in summary["top_categories"]} == {"SPAM", "HARASSMENT"}
        assert summary["pending_review"] == 1

    def test_records_outside_window_are_ignored(self):
        baker.make(AuditRecord, kind=AuditRecord.Kind.MODERATION, action=ModerationAction.BLOCKED)

        summary = ModerationStatsService.summary("week", now=timezone.now() + timedelta(days=8))

        assert summary["total"] == 0
        assert summary["average_confidence"] == 0.0
