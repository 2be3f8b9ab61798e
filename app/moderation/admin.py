from django.contrib import admin

from app.moderation.models import AuditRecord, EnforcementConfig, ViolationRuleRecord


@admin.register(AuditRecord)
class AuditRecordAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "kind",
        "action",
        "primary_rule",
        "confidence",
        "review_priority",
        "requires_human_review",
        "degraded",
        "created_at",
    ]
    list_filter = ["kind", "action", "requires_human_review", "review_priority", "degraded", "created_at"]
    search_fields = ["content__body", "author__email", "primary_rule"]
    ordering = ["-review_priority", "created_at"]

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(EnforcementConfig)
class EnforcementConfigAdmin(admin.ModelAdmin):
    list_display = ["user", "status", "reputation_score", "warning_count", "suspended_until", "last_violation_at"]
    list_filter = ["status"]
    search_fields = ["user__email", "user__name"]
    readonly_fields = [
        "id",
        "user",
        "reputation_score",
        "warning_count",
        "status",
        "suspended_until",
        "last_violation_at",
        "last_suspended_at",
        "last_recovered_at",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False


@admin.register(ViolationRuleRecord)
class ViolationRuleRecordAdmin(admin.ModelAdmin):
    list_display = ["rule_id", "name", "category", "severity", "action", "enabled", "position"]
    list_filter = ["category", "action", "enabled", "severity"]
    list_editable = ["enabled", "position"]
    search_fields = ["rule_id", "name", "description"]
    readonly_fields = ["id", "created_at", "updated_at"]
    actions = ["enable_rules", "disable_rules"]

    @admin.action(description="Ativar regras selecionadas")
    def enable_rules(self, request, queryset):
        for rule in queryset:
            rule.enabled = True
            rule.save(update_fields=["enabled", "updated_at"])

    @admin.action(description="Desativar regras selecionadas")
    def disable_rules(self, request, queryset):
        for rule in queryset:
            rule.enabled = False
            rule.save(update_fields=["enabled", "updated_at"])
