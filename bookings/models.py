from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q, UniqueConstraint
from django.db.models.signals import post_migrate
from django.dispatch import receiver

from turfs.models import Turf, TurfSlot


class Booking(models.Model):
    """
    A player's claim on one weekly slot for one calendar date.
    Money fields are fixed at booking time so later price edits don't rewrite history.
    """
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    # statuses that hold the slot for the date
    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED)

    player = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings"
    )
    turf = models.ForeignKey(Turf, on_delete=models.CASCADE, related_name="bookings")
    slot = models.ForeignKey(TurfSlot, on_delete=models.PROTECT, related_name="bookings")
    booking_date = models.DateField(db_index=True)

    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    commission_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    owner_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-booking_date", "-created_at"]
        constraints = [
            # One live booking per slot per date; cancelled/completed rows don't count
            UniqueConstraint(
                fields=["slot", "booking_date"],
                condition=Q(status__in=["pending", "confirmed"]),
                name="unique_active_booking_per_slot_date",
            ),
        ]
        indexes = [
            models.Index(fields=["turf", "booking_date"], name="booking_turf_date_idx"),
            models.Index(fields=["player", "booking_date"], name="booking_player_date_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} | {self.turf.name} | {self.booking_date} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES


class Payment(models.Model):
    """Payment record for a booking. Only a mock gateway exists for now."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SUCCESS = "success", "Success"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"

    booking = models.OneToOneField(Booking, on_delete=models.CASCADE, related_name="payment")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    transaction_id = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Payment {self.transaction_id or self.pk} | {self.status} | ₹{self.amount}"


class PayoutLedger(models.Model):
    """What the platform owes an owner for a booking, after commission."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        VOID = "void", "Void"

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="payouts")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payouts"
    )
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    commission_amount = models.DecimalField(max_digits=10, decimal_places=2)
    owner_payout = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Payout for booking #{self.booking_id} → {self.owner}: ₹{self.owner_payout} ({self.status})"


class PlatformSetting(models.Model):
    COMMISSION_RATE = "commission_rate"

    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


# -------------------------------------------------------
# Seed the commission rate after migrate so bookings have a rate to read
# -------------------------------------------------------
@receiver(post_migrate)
def ensure_default_settings(sender, **kwargs):
    # Only seed when the bookings app is migrated
    if sender.label != "bookings":
        return
    PlatformSetting.objects.get_or_create(
        key=PlatformSetting.COMMISSION_RATE,
        defaults={"value": str(settings.TURF_COMMISSION_RATE)},
    )
