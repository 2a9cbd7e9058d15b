# accounts/admin.py
from django.contrib import admin, messages
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Profile, RoleChangeLog

User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "role", "is_active", "is_superuser", "date_joined")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("username", "email", "profile__full_name", "profile__phone")
    ordering = ("username",)

    fieldsets = DjangoUserAdmin.fieldsets + (("Marketplace", {"fields": ("role",)}),)
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (("Marketplace", {"fields": ("email", "role")}),)
    readonly_fields = ("last_login", "date_joined")

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if not request.user.is_superuser:
            # role changes from here bypass the audit log, so only superusers get them
            fields += ["role", "is_superuser", "user_permissions"]
        return fields

    def delete_model(self, request, obj):
        last_superuser = obj.is_superuser and not User.objects.filter(is_superuser=True).exclude(pk=obj.pk).exists()
        if last_superuser:
            self.message_user(request, "The last superuser can't be deleted.", level=messages.ERROR)
            return
        super().delete_model(request, obj)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "phone", "city", "updated_at")
    search_fields = ("user__username", "user__email", "full_name", "phone", "city")
    list_select_related = ("user",)


@admin.register(RoleChangeLog)
class RoleChangeLogAdmin(admin.ModelAdmin):
    list_display = ("target", "old_role", "new_role", "changed_by", "changed_at")
    list_filter = ("new_role",)
    search_fields = ("target__username", "changed_by__username", "reason")
    date_hierarchy = "changed_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
