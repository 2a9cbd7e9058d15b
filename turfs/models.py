from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q, UniqueConstraint

AMENITY_CHOICES = [
    "Parking",
    "Changing Room",
    "Drinking Water",
    "Floodlights",
    "Washroom",
    "Cafeteria",
    "First Aid",
    "WiFi",
]

# 0 = Sunday, matching the weekday numbering owners see in the slot grid
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class Turf(models.Model):
    """A sports ground listed by an owner and approved by an admin."""

    class Sport(models.TextChoices):
        CRICKET = "cricket", "Cricket"
        FOOTBALL = "football", "Football"
        BADMINTON = "badminton", "Badminton"
        TENNIS = "tennis", "Tennis"
        BASKETBALL = "basketball", "Basketball"
        HOCKEY = "hockey", "Hockey"
        VOLLEYBALL = "volleyball", "Volleyball"
        OTHER = "other", "Other"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        DEACTIVATED = "deactivated", "Deactivated"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="turfs",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    city = models.CharField(max_length=100)
    area = models.CharField(max_length=100)
    address = models.CharField(max_length=255, blank=True)
    sport_type = models.CharField(max_length=20, choices=Sport.choices, default=Sport.CRICKET)
    amenities = models.JSONField(default=list, blank=True)
    hourly_price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "city"], name="turf_status_city_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.area}, {self.city})"

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.APPROVED

    @property
    def cover_image(self):
        # images are prefetched in list views; fall back to a query otherwise
        images = list(self.images.all())
        return images[0] if images else None


class TurfSlot(models.Model):
    """A recurring weekly window during which the turf can be booked."""

    turf = models.ForeignKey(Turf, on_delete=models.CASCADE, related_name="slots")
    day_of_week = models.PositiveSmallIntegerField(
        choices=list(enumerate(DAY_NAMES)),
        validators=[MinValueValidator(0), MaxValueValidator(6)],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    price_override = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["day_of_week", "start_time"]
        constraints = [
            UniqueConstraint(fields=["turf", "day_of_week", "start_time"], name="unique_slot_start_per_turf_day"),
            models.CheckConstraint(name="slot_valid_range", condition=Q(end_time__gt=models.F("start_time"))),
            models.CheckConstraint(name="slot_day_of_week_range", condition=Q(day_of_week__lte=6)),
        ]

    def __str__(self) -> str:
        return f"{self.turf.name} | {DAY_NAMES[self.day_of_week]} {self.start_time:%H:%M}–{self.end_time:%H:%M}"

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} – {self.end_time:%H:%M}"

    @property
    def price(self):
        return self.price_override if self.price_override is not None else self.turf.hourly_price


def turf_image_path(instance: "TurfImage", filename: str) -> str:
    return f"turfs/{instance.turf_id}/{filename}"


class TurfImage(models.Model):
    turf = models.ForeignKey(Turf, on_delete=models.CASCADE, related_name="images")
    image = models.ImageField(upload_to=turf_image_path)
    display_order = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order", "id"]

    def __str__(self) -> str:
        return f"{self.turf.name} photo #{self.display_order + 1}"
