import pytest

from app.moderation.domain.catalog import RuleCatalog
from app.moderation.domain.composer import VerdictComposer
from app.moderation.domain.enums import (
    AuthorRole,
    CommunityVisibility,
    ContentType,
    EnforcementAction,
    ModerationAction,
    ModerationSource,
    ReviewPriority,
    ViolationCategory,
)
from app.moderation.domain.external import external_matches
from app.moderation.domain.matcher import RuleMatcher
from app.moderation.domain.positive import detect_positive_signals
from app.moderation.domain.results import ModerationContext, ModerationResult, PositiveSignal, RuleMatch
from app.moderation.domain.rules import ViolationRule
from app.moderation.domain.strategies import ClassifierResult
from app.moderation.exceptions import InvalidRuleError

PUBLIC_POST = ModerationContext(
    content_type=ContentType.POST, author_role=AuthorRole.CLIENT, community_visibility=CommunityVisibility.PUBLIC
)


def make_rule(**overrides) -> ViolationRule:
    data = {
        "id": "TEST_RULE",
        "name": "Test Rule",
        "category": ViolationCategory.SPAM,
        "severity": 3,
        "base_confidence": 0.5,
        "action": ModerationAction.FLAGGED,
        "patterns": ["buy now"],
    }
    data.update(overrides)
    return ViolationRule.from_dict(data)


def make_match(**overrides) -> RuleMatch:
    data = {
        "rule_id": "CUSTOM",
        "name": "Custom",
        "category": ViolationCategory.HARASSMENT,
        "description": "Custom violation",
        "severity": 4,
        "confidence": 0.9,
        "base_confidence": 0.8,
        "action": ModerationAction.FLAGGED,
        "source": ModerationSource.CUSTOM_RULES,
    }
    data.update(overrides)
    return RuleMatch(**data)


def clean_classifier_result() -> ClassifierResult:
    return ClassifierResult(
        flagged=False,
        provider="local_dictionary",
        categories={"harassment": False},
        category_scores={"harassment": 0.0},
    )


@pytest.mark.unit
class TestViolationRule:
    def test_from_dict_normalizes_choices(self):
        rule = make_rule()

        assert rule.category == "SPAM"
        assert rule.action == "FLAGGED"
        assert rule.applicable_content_types == tuple(ContentType.values)
        assert rule.applicable_author_roles == ("CLIENT", "TRAINER")

    @pytest.mark.parametrize(
        "overrides,problem",
        [
            ({"severity": 0}, "severity"),
            ({"severity": 6}, "severity"),
            ({"base_confidence": 1.5}, "base_confidence"),
            ({"category": "GOSSIP"}, "categoria"),
            ({"action": "DELETE"}, "ação"),
            ({"auto_block": True}, "auto_block"),
            ({"patterns": [], "keywords": [], "regex_patterns": []}, "padrão"),
            ({"regex_patterns": ["(unclosed"]}, "regex"),
            ({"applicable_author_roles": ["GUEST"]}, "author role"),
        ],
        ids=[
            "severity_too_low",
            "severity_too_high",
            "confidence_out_of_range",
            "unknown_category",
            "unknown_action",
            "auto_block_requires_blocked",
            "no_matchers",
            "invalid_regex",
            "unknown_role",
        ],
    )
    def test_invalid_rule_is_rejected(self, overrides, problem):
        with pytest.raises(InvalidRuleError) as exc_info:
            make_rule(**overrides)

        assert exc_info.value.rule_id == "TEST_RULE"
        assert problem in exc_info.value.problem

    def test_missing_required_field(self):
        with pytest.raises(InvalidRuleError, match="campo obrigatório"):
            ViolationRule.from_dict({"id": "BROKEN", "name": "Broken"})


@pytest.mark.unit
class TestRuleCatalog:
    def test_default_catalog_loads(self):
        catalog = RuleCatalog.default()

        assert len(catalog) == 10
        assert "UNSOLICITED_PERSONAL_ATTENTION" in catalog
        assert catalog.position("INAPPROPRIATE_PERSONAL_COMMENTS") == 0

    def test_duplicate_ids_are_rejected(self):
        with pytest.raises(InvalidRuleError, match="duplicado"):
            RuleCatalog([make_rule(), make_rule()])

    def test_applicable_to_filters_by_context(self):
        catalog = RuleCatalog.default()
        trainer_context = ModerationContext(
            content_type=ContentType.POST,
            author_role=AuthorRole.TRAINER,
            community_visibility=CommunityVisibility.PUBLIC,
        )

        client_ids = {rule.id for rule in catalog.applicable_to(PUBLIC_POST)}
        trainer_ids = {rule.id for rule in catalog.applicable_to(trainer_context)}

        assert "FAKE_TRAINER_CREDENTIALS" in client_ids
        assert "FAKE_TRAINER_CREDENTIALS" not in trainer_ids
        assert "PREDATORY_TRAINING_OFFERS" in trainer_ids
        assert "PREDATORY_TRAINING_OFFERS" not in client_ids

    def test_private_community_skips_public_only_rules(self):
        context = ModerationContext(
            content_type=ContentType.POST,
            author_role=AuthorRole.CLIENT,
            community_visibility=CommunityVisibility.PRIVATE,
        )

        ids = {rule.id for rule in RuleCatalog.default().applicable_to(context)}

        assert "SUPPLEMENT_SPAM" not in ids
        assert "OFF_TOPIC_CONTENT" not in ids

    def test_disabled_and_approval_rules_never_apply(self):
        catalog = RuleCatalog(
            [
                make_rule(id="DISABLED", enabled=False),
                make_rule(id="ALLOW", action=ModerationAction.APPROVED),
                make_rule(id="ACTIVE"),
            ]
        )

        assert [rule.id for rule in catalog.applicable_to(PUBLIC_POST)] == ["ACTIVE"]
        assert len(catalog.active_rules) == 2


@pytest.mark.unit
class TestRuleMatcher:
    def test_appearance_comment_is_matched(self):
        match_set = RuleMatcher(RuleCatalog.default()).evaluate("You have such a sexy body!!", PUBLIC_POST)

        assert len(match_set) == 1
        match = match_set[0]
        assert match.rule_id == "INAPPROPRIATE_PERSONAL_COMMENTS"
        assert match.matches == ("sexy", "sexy body")
        assert match.confidence == 1.0
        assert match.requires_human_review is True

    def test_contact_request_is_matched(self):
        match_set = RuleMatcher(RuleCatalog.default()).evaluate("DM me, my number is 555-123-4567", PUBLIC_POST)

        assert [m.rule_id for m in match_set] == ["UNSOLICITED_PERSONAL_ATTENTION"]
        assert match_set[0].matches == ("dm me", "my number is", "555-123-4567")
        assert match_set[0].severity == 5

    def test_clean_fitness_content_has_no_matches(self):
        match_set = RuleMatcher(RuleCatalog.default()).evaluate(
            "Great squat depth today, keep pushing your goals!", PUBLIC_POST
        )

        assert match_set == ()

    def test_keywords_match_whole_words_only(self):
        rule = make_rule(patterns=["discount code"], keywords=["promo"])
        catalog = RuleCatalog([rule])

        assert RuleMatcher(catalog).evaluate("promotion season at the gym", PUBLIC_POST) == ()
        assert RuleMatcher(catalog).evaluate("use my promo please", PUBLIC_POST)[0].matches == ("promo",)

    def test_matches_are_deduplicated_case_insensitively(self):
        rule = make_rule(patterns=["dm me"], regex_patterns=[r"\bdm\s+me\b"])

        match_set = RuleMatcher(RuleCatalog([rule])).evaluate("DM me now", PUBLIC_POST)

        assert match_set[0].matches == ("dm me",)

    def test_rule_order_is_preserved(self):
        catalog = RuleCatalog([make_rule(id="FIRST"), make_rule(id="SECOND")])

        match_set = RuleMatcher(catalog).evaluate("buy now", PUBLIC_POST)

        assert [(m.rule_id, m.order) for m in match_set] == [("FIRST", 0), ("SECOND", 1)]


@pytest.mark.unit
class TestConfidenceCalculation:
    def test_exact_pattern_bonus(self):
        rule = make_rule()

        assert RuleMatcher.calculate_confidence(rule, ("buy now",), "buy now") == 0.7

    def test_keyword_match_has_no_exact_bonus(self):
        rule = make_rule(keywords=["promo"])

        assert RuleMatcher.calculate_confidence(rule, ("promo",), "promo") == 0.6

    def test_match_bonus_is_capped(self):
        rule = make_rule(patterns=["x"])

        confidence = RuleMatcher.calculate_confidence(rule, ("a", "b", "c", "d", "e"), "a b c d e")

        assert confidence == 0.8

    def test_long_content_is_discounted(self):
        rule = make_rule()
        content = "buy now " + "x" * 600

        assert RuleMatcher.calculate_confidence(rule, ("buy now",), content) == 0.64

    def test_confidence_is_clamped(self):
        rule = make_rule(base_confidence=0.95)

        assert RuleMatcher.calculate_confidence(rule, ("buy now", "b", "c"), "buy now b c") == 1.0


@pytest.mark.unit
class TestPositiveSignals:
    def test_fitness_vocabulary(self):
        signal = detect_positive_signals("Great squat depth today, keep pushing your goals!")

        assert signal.is_on_topic is True
        assert set(signal.indicators) == {"squat", "goals"}
        assert signal.confidence_bonus == 0.2

    def test_bonus_is_capped(self):
        signal = detect_positive_signals("Great job on your workout, keep going!")

        assert "great job" in signal.indicators
        assert signal.confidence_bonus == 0.3

    def test_off_topic_text(self):
        signal = detect_positive_signals("Anyone watching the election tonight?")

        assert signal == PositiveSignal(is_on_topic=False, confidence_bonus=0.0, indicators=())


@pytest.mark.unit
class TestExternalMatches:
    def test_flagged_category_becomes_match(self):
        result = ClassifierResult(
            flagged=True,
            provider="local_dictionary",
            categories={"harassment": True},
            category_scores={"harassment": 1.0},
        )

        (match,) = external_matches(result, threshold=0.7)

        assert match.rule_id == "EXTERNAL:harassment"
        assert match.category == ViolationCategory.HARASSMENT
        assert match.severity == 3
        assert match.action == ModerationAction.FLAGGED
        assert match.requires_human_review is False
        assert match.source == ModerationSource.EXTERNAL_CLASSIFIER

    def test_high_score_without_flag_does_not_fire(self):
        result = ClassifierResult(
            flagged=False,
            provider="google_gemini",
            categories={"sexual/minors": False, "violence": False},
            category_scores={"sexual/minors": 0.9, "violence": 0.4},
        )

        assert external_matches(result, threshold=0.7) == ()

    def test_flagged_category_below_threshold_does_not_fire(self):
        result = ClassifierResult(
            flagged=True,
            provider="google_gemini",
            categories={"sexual/minors": False, "violence": True},
            category_scores={"sexual/minors": 0.9, "violence": 0.4},
        )

        assert external_matches(result, threshold=0.7) == ()

    def test_flagged_high_severity_category_blocks(self):
        result = ClassifierResult(
            flagged=True,
            provider="google_gemini",
            categories={"sexual/minors": True},
            category_scores={"sexual/minors": 0.9},
        )

        (match,) = external_matches(result, threshold=0.7)

        assert match.category == ViolationCategory.INAPPROPRIATE_CONTENT
        assert match.severity == 5
        assert match.action == ModerationAction.BLOCKED
        assert match.auto_block is True
        assert match.confidence == 0.9

    def test_unknown_category_gets_default_severity(self):
        result = ClassifierResult(
            flagged=True, provider="google_gemini", categories={"spam": True}, category_scores={"spam": 0.8}
        )

        (match,) = external_matches(result, threshold=0.7)

        assert match.severity == 2
        assert match.description == "Violation: spam"

    def test_no_result(self):
        assert external_matches(None, threshold=0.7) == ()


@pytest.mark.unit
class TestVerdictComposer:
    def test_nothing_fired_is_approved(self):
        verdict = VerdictComposer().compose((), clean_classifier_result())

        assert verdict.action == ModerationAction.APPROVED
        assert verdict.source == ModerationSource.COMBINED
        assert verdict.degraded is False
        assert verdict.appealable is False

    def test_unflagged_high_score_is_approved(self):
        external = ClassifierResult(
            flagged=False,
            provider="google_gemini",
            categories={"harassment": False},
            category_scores={"harassment": 0.75},
        )

        verdict = VerdictComposer(0.7).compose((), external)

        assert verdict.action == ModerationAction.APPROVED
        assert verdict.confidence == 0.0
        assert verdict.categories == ()

    def test_missing_classifier_is_degraded(self):
        verdict = VerdictComposer().compose((make_match(),), None)

        assert verdict.degraded is True
        assert verdict.source == ModerationSource.CUSTOM_RULES
        assert verdict.action == ModerationAction.FLAGGED

    def test_highest_severity_wins(self):
        low = make_match(rule_id="LOW", severity=2, confidence=1.0, description="Low")
        high = make_match(rule_id="HIGH", severity=5, confidence=0.6, action=ModerationAction.BLOCKED, description="High")

        verdict = VerdictComposer().compose((low, high), clean_classifier_result())

        assert verdict.primary.rule_id == "HIGH"
        assert verdict.action == ModerationAction.BLOCKED
        assert verdict.reason == "Content blocked: High (+1 more)"
        assert [c.rule_id for c in verdict.categories] == ["HIGH", "LOW"]

    def test_custom_rule_wins_tie_against_classifier(self):
        custom = make_match(rule_id="CUSTOM", confidence=0.9)
        result = ClassifierResult(
            flagged=True,
            provider="google_gemini",
            categories={"harassment/threatening": True},
            category_scores={"harassment/threatening": 0.9},
        )

        verdict = VerdictComposer().compose((custom,), result)

        assert verdict.primary.rule_id == "CUSTOM"
        assert verdict.categories[1].rule_id == "EXTERNAL:harassment/threatening"
        assert verdict.source == ModerationSource.COMBINED

    def test_positive_bonus_never_goes_below_base_confidence(self):
        match = make_match(confidence=0.9, base_confidence=0.8)
        positive = PositiveSignal(is_on_topic=True, confidence_bonus=0.3, indicators=("workout",))

        verdict = VerdictComposer().compose((match,), clean_classifier_result(), positive)

        assert verdict.confidence == 0.8
        assert verdict.action == ModerationAction.FLAGGED

    @pytest.mark.parametrize(
        "severity,priority,suggested",
        [
            (2, ReviewPriority.LOW, EnforcementAction.WARN),
            (3, ReviewPriority.MEDIUM, EnforcementAction.WARN),
            (4, ReviewPriority.HIGH, EnforcementAction.SUSPEND_3D),
            (5, ReviewPriority.HIGH, EnforcementAction.SUSPEND_3D),
        ],
    )
    def test_priority_and_suggested_action_follow_severity(self, severity, priority, suggested):
        verdict = VerdictComposer().compose((make_match(severity=severity),), clean_classifier_result())

        assert verdict.review_priority == priority
        assert verdict.suggested_account_action == suggested

    def test_severe_block_always_requires_review(self):
        match = make_match(action=ModerationAction.BLOCKED, severity=4, requires_human_review=False)

        verdict = VerdictComposer().compose((match,), clean_classifier_result())

        assert verdict.requires_human_review is True

    def test_verdict_survives_serialization(self):
        verdict = VerdictComposer().compose((make_match(matches=("a", "b")),), None)

        restored = ModerationResult.from_dict(verdict.to_dict())

        assert restored == verdict
