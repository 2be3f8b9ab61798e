from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from app.accounts.models import User
from app.moderation.models import EnforcementConfig


class EnforcementConfigInline(admin.StackedInline):
    """Situação de moderação do usuário, somente leitura (alterada apenas pelo EnforcementService)."""

    model = EnforcementConfig
    can_delete = False
    extra = 0
    max_num = 1
    fields = ["status", "suspended_until", "reputation_score", "warning_count", "last_violation_at"]
    readonly_fields = fields


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    ordering = ("email",)
    inlines = [EnforcementConfigInline]
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Perfil", {"fields": ("name", "role")}),
        ("Permissões", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "name", "role", "password1", "password2")}),
    )
    list_display = ("email", "name", "role", "account_status", "is_active")
    list_filter = ("role", "enforcement__status", "is_staff", "is_active")
    list_select_related = ("enforcement",)
    search_fields = ("email", "name")

    @admin.display(description="Situação")
    def account_status(self, obj: User) -> str:
        config = getattr(obj, "enforcement", None)
        return config.get_status_display() if config else "-"
