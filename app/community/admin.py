from django.contrib import admin

from app.community.models import Community, CommunityMembership, Content


class CommunityMembershipInline(admin.TabularInline):
    model = CommunityMembership
    extra = 1


@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    list_display = ["name", "visibility", "created_at"]
    list_filter = ["visibility", "created_at"]
    search_fields = ["name"]
    inlines = [CommunityMembershipInline]


@admin.register(CommunityMembership)
class CommunityMembershipAdmin(admin.ModelAdmin):
    list_display = ["user", "community", "role", "created_at"]
    list_filter = ["role", "created_at"]
    search_fields = ["user__email", "community__name"]


@admin.register(Content)
class ContentAdmin(admin.ModelAdmin):
    list_display = ["id", "community", "author", "content_type", "body_preview", "status", "created_at"]
    list_filter = ["status", "content_type", "created_at", "community"]
    search_fields = ["body", "author__email"]
    readonly_fields = ["id", "created_at", "updated_at"]

    @admin.display(description="Prévia")
    def body_preview(self, obj):
        return obj.body[:50]
