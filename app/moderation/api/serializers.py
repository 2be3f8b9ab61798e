from rest_framework import serializers

from app.moderation.domain.rules import ViolationRule
from app.moderation.exceptions import InvalidRuleError
from app.moderation.models import AuditRecord, ViolationRuleRecord
from app.moderation.services.review import OVERTURN, UPHOLD
from app.moderation.services.stats import WINDOWS


class AuditRecordSerializer(serializers.ModelSerializer):
    review_priority = serializers.CharField(source="get_review_priority_display", read_only=True)

    class Meta:
        model = AuditRecord
        fields = [
            "id",
            "kind",
            "parent",
            "content",
            "content_type",
            "author",
            "action",
            "confidence",
            "source",
            "reason",
            "primary_category",
            "primary_rule",
            "categories",
            "requires_human_review",
            "review_priority",
            "suggested_account_action",
            "appealable",
            "degraded",
            "enforcement_action",
            "previous_status",
            "new_status",
            "reputation_delta",
            "effective_until",
            "reviewer",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class ResolveReviewSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[UPHOLD, OVERTURN])
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AppealSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)


class StatsQuerySerializer(serializers.Serializer):
    window = serializers.ChoiceField(choices=list(WINDOWS), default="day")


class RecordFilterSerializer(serializers.Serializer):
    author = serializers.UUIDField(required=False)
    action = serializers.CharField(required=False)
    kind = serializers.CharField(required=False)
    content_type = serializers.CharField(required=False)
    degraded = serializers.ChoiceField(choices=["true", "false"], required=False)
    date_from = serializers.DateTimeField(required=False)
    date_to = serializers.DateTimeField(required=False)


class ViolationRuleRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = ViolationRuleRecord
        fields = [
            "id",
            "rule_id",
            "name",
            "description",
            "category",
            "severity",
            "base_confidence",
            "action",
            "patterns",
            "keywords",
            "regex_patterns",
            "applicable_content_types",
            "applicable_author_roles",
            "applicable_community_visibility",
            "auto_block",
            "requires_human_review",
            "enabled",
            "position",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs: dict) -> dict:
        """Valida a regra completa com as mesmas checagens do carregamento do catálogo."""
        merged = ViolationRuleRecord(**{**self._current_values(), **attrs})
        try:
            ViolationRule.from_dict(merged.to_rule_dict())
        except InvalidRuleError as exc:
            raise serializers.ValidationError({"rule": exc.problem}) from exc
        return attrs

    def _current_values(self) -> dict:
        if self.instance is None:
            return {}
        return {field: getattr(self.instance, field) for field in self.Meta.fields if field not in self.Meta.read_only_fields}
