# turfs/admin.py
from django.contrib import admin

from .models import Turf, TurfImage, TurfSlot


class TurfSlotInline(admin.TabularInline):
    model = TurfSlot
    extra = 0
    fields = ("day_of_week", "start_time", "end_time", "price_override", "is_active")


class TurfImageInline(admin.TabularInline):
    model = TurfImage
    extra = 0
    fields = ("image", "display_order")


@admin.register(Turf)
class TurfAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "city", "area", "sport_type", "hourly_price", "status", "created_at")
    list_filter = ("status", "sport_type", "city")
    search_fields = ("name", "area", "city", "owner__username", "owner__email")
    autocomplete_fields = ("owner",)
    inlines = [TurfSlotInline, TurfImageInline]
    actions = ["approve_turfs", "reject_turfs"]

    @admin.action(description="Approve selected pending turfs")
    def approve_turfs(self, request, queryset):
        count = queryset.filter(status=Turf.Status.PENDING).update(status=Turf.Status.APPROVED)
        self.message_user(request, f"Approved {count} turf(s).")

    @admin.action(description="Reject selected pending turfs")
    def reject_turfs(self, request, queryset):
        count = queryset.filter(status=Turf.Status.PENDING).update(status=Turf.Status.REJECTED)
        self.message_user(request, f"Rejected {count} turf(s).")


@admin.register(TurfSlot)
class TurfSlotAdmin(admin.ModelAdmin):
    list_display = ("turf", "day_of_week", "start_time", "end_time", "price_override", "is_active")
    list_filter = ("day_of_week", "is_active")
    search_fields = ("turf__name",)
