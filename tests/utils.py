from datetime import time, timedelta
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from accounts.models import User
from bookings.services import day_of_week
from turfs.models import Turf, TurfSlot

PASSWORD = "Str0ng-pass-123!"

# 1x1 transparent GIF
TINY_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04"
    b"\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


def make_user(username, role=User.Roles.PLAYER, **extra):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=PASSWORD,
        role=role,
        **extra,
    )


def make_turf(owner, *, name="Green Arena", status=Turf.Status.APPROVED, **extra):
    fields = {
        "city": "Pune",
        "area": "Baner",
        "sport_type": Turf.Sport.FOOTBALL,
        "hourly_price": Decimal("1000.00"),
    }
    fields.update(extra)
    return Turf.objects.create(owner=owner, name=name, status=status, **fields)


def make_slot(turf, on_date, start=time(18, 0), end=time(19, 0), **extra):
    return TurfSlot.objects.create(
        turf=turf,
        day_of_week=day_of_week(on_date),
        start_time=start,
        end_time=end,
        **extra,
    )


def tomorrow():
    return timezone.localdate() + timedelta(days=1)


def yesterday():
    return timezone.localdate() - timedelta(days=1)


def gif(name="photo.gif"):
    return SimpleUploadedFile(name, TINY_GIF, content_type="image/gif")
