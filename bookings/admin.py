# bookings/admin.py
from django.contrib import admin

from .models import Booking, Payment, PayoutLedger, PlatformSetting


class PaymentInline(admin.StackedInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ("amount", "status", "transaction_id", "payment_method", "created_at")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "turf", "player", "booking_date", "slot", "total_amount", "status", "created_at")
    list_filter = ("status", "booking_date")
    search_fields = ("turf__name", "player__username", "player__email")
    date_hierarchy = "booking_date"
    list_select_related = ("turf", "player", "slot")
    readonly_fields = ("total_amount", "commission_amount", "owner_amount", "created_at", "updated_at")
    inlines = [PaymentInline]


@admin.register(PayoutLedger)
class PayoutLedgerAdmin(admin.ModelAdmin):
    list_display = ("booking", "owner", "total_amount", "commission_rate", "commission_amount", "owner_payout", "status")
    list_filter = ("status",)
    search_fields = ("owner__username", "booking__turf__name")


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)
