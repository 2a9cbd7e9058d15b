# bookings/services.py
"""
Slot availability and the booking commit.

Views never write Booking/Payment rows themselves; they call into here so the
availability check and the insert happen inside one transaction.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import List, Optional, Set

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.permissions import is_admin_like
from turfs.models import Turf, TurfSlot
from .models import Booking, Payment, PayoutLedger, PlatformSetting

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PriceSplit:
    total: Decimal
    commission: Decimal
    owner_amount: Decimal
    rate: Decimal


@dataclass(frozen=True)
class SlotAvailability:
    slot: TurfSlot
    price: Decimal
    is_booked: bool


# ---- Pricing -----------------------------------------------------------------

def get_commission_rate() -> Decimal:
    """Platform commission in percent. The settings row wins over the env default."""
    raw = (
        PlatformSetting.objects.filter(key=PlatformSetting.COMMISSION_RATE)
        .values_list("value", flat=True)
        .first()
    )
    if raw is None:
        raw = settings.TURF_COMMISSION_RATE
    try:
        rate = Decimal(str(raw))
    except InvalidOperation:
        logger.error("Invalid commission_rate %r in platform settings, using default", raw)
        rate = Decimal(str(settings.TURF_COMMISSION_RATE))
    return rate


def slot_price(slot: TurfSlot) -> Decimal:
    """A slot's own price override, else the turf's hourly price."""
    price = slot.price_override if slot.price_override is not None else slot.turf.hourly_price
    return Decimal(price)


def split_payment(price, rate: Optional[Decimal] = None) -> PriceSplit:
    """
    commission = price * rate%, rounded half-up to paise
    owner_amount = price - commission
    """
    if rate is None:
        rate = get_commission_rate()
    total = Decimal(price).quantize(CENT, rounding=ROUND_HALF_UP)
    commission = (total * Decimal(rate) / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
    owner_amount = (total - commission).quantize(CENT, rounding=ROUND_HALF_UP)
    return PriceSplit(total=total, commission=commission, owner_amount=owner_amount, rate=Decimal(rate))


# ---- Availability ------------------------------------------------------------

def day_of_week(on_date: date) -> int:
    """0 = Sunday ... 6 = Saturday (date.weekday() starts at Monday)."""
    return (on_date.weekday() + 1) % 7


def slots_for_date(turf: Turf, on_date: date):
    return (
        TurfSlot.objects.filter(turf=turf, day_of_week=day_of_week(on_date), is_active=True)
        .select_related("turf")
        .order_by("start_time")
    )


def booked_slot_ids(turf: Turf, on_date: date) -> Set[int]:
    return set(
        Booking.objects.filter(
            turf=turf,
            booking_date=on_date,
            status__in=Booking.ACTIVE_STATUSES,
        ).values_list("slot_id", flat=True)
    )


def availability(turf: Turf, on_date: date) -> List[SlotAvailability]:
    taken = booked_slot_ids(turf, on_date)
    return [
        SlotAvailability(slot=s, price=slot_price(s), is_booked=s.pk in taken)
        for s in slots_for_date(turf, on_date)
    ]


# ---- Booking commit ----------------------------------------------------------

def _mock_transaction_id() -> str:
    return f"MOCK_{int(time.time() * 1000)}"


def _validate_request(*, player, turf: Turf, slot: TurfSlot, on_date: date) -> None:
    if not getattr(player, "is_authenticated", False):
        raise ValidationError("Sign in to book a slot.")
    if on_date < timezone.localdate():
        raise ValidationError("You can’t book a date in the past.")
    if turf.status != Turf.Status.APPROVED:
        raise ValidationError("This turf is not accepting bookings.")
    if slot.turf_id != turf.pk:
        raise ValidationError("That slot does not belong to this turf.")
    if not slot.is_active:
        raise ValidationError("That slot is no longer offered.")
    if slot.day_of_week != day_of_week(on_date):
        raise ValidationError("That slot is not offered on the selected day.")


@transaction.atomic
def book_slot(*, player, turf: Turf, slot: TurfSlot, on_date: date) -> Booking:
    """
    Confirm a booking and record its mock payment.

    The slot row is locked and availability re-checked inside the transaction;
    the partial unique constraint on (slot, booking_date) backs that up.
    The payout ledger row is written by the Booking post_save signal.
    """
    _validate_request(player=player, turf=turf, slot=slot, on_date=on_date)

    # Serialise concurrent commits for the same slot
    TurfSlot.objects.select_for_update().filter(pk=slot.pk).first()

    already_taken = Booking.objects.filter(
        slot=slot, booking_date=on_date, status__in=Booking.ACTIVE_STATUSES
    ).exists()
    if already_taken:
        logger.warning("Refused booking: slot %s on %s already taken (player=%s)", slot.pk, on_date, player.pk)
        raise ValidationError("Sorry, that slot is already booked for this date.")

    split = split_payment(slot_price(slot))

    booking = Booking(
        player=player,
        turf=turf,
        slot=slot,
        booking_date=on_date,
        total_amount=split.total,
        commission_amount=split.commission,
        owner_amount=split.owner_amount,
        status=Booking.Status.CONFIRMED,
    )
    # read by the post_save payout signal
    booking.applied_commission_rate = split.rate

    try:
        with transaction.atomic():
            booking.save(force_insert=True)
    except IntegrityError:
        logger.warning("Refused booking: constraint hit for slot %s on %s (player=%s)", slot.pk, on_date, player.pk)
        raise ValidationError("Sorry, that slot is already booked for this date.")

    Payment.objects.create(
        booking=booking,
        amount=split.total,
        status=Payment.Status.SUCCESS,
        transaction_id=_mock_transaction_id(),
        payment_method="mock",
    )

    logger.info(
        "Booking %s confirmed: turf=%s slot=%s date=%s total=%s commission=%s",
        booking.pk, turf.pk, slot.pk, on_date, split.total, split.commission,
    )
    return booking


def record_payout(booking: Booking, rate: Optional[Decimal] = None) -> PayoutLedger:
    """
    Ledger entry crediting the turf owner for a confirmed booking.
    `rate` is the commission rate the booking's split was computed with.
    """
    if rate is None:
        rate = get_commission_rate()
    return PayoutLedger.objects.create(
        booking=booking,
        owner_id=booking.turf.owner_id,
        total_amount=booking.total_amount,
        commission_rate=rate,
        commission_amount=booking.commission_amount,
        owner_payout=booking.owner_amount,
    )


# ---- Cancellation / completion -----------------------------------------------

@transaction.atomic
def cancel_booking(*, booking: Booking, user) -> Booking:
    """
    Cancel a live booking. The payment is marked refunded and the owner's
    payout row voided so dashboards stop counting it.
    """
    booking = Booking.objects.select_for_update().get(pk=booking.pk)

    if booking.player_id != user.pk and not is_admin_like(user):
        raise ValidationError("You can only cancel your own bookings.")
    if not booking.is_active:
        raise ValidationError("This booking is already closed.")
    if booking.booking_date < timezone.localdate():
        raise ValidationError("Past bookings can’t be cancelled.")

    booking.status = Booking.Status.CANCELLED
    booking.save(update_fields=["status", "updated_at"])

    Payment.objects.filter(booking=booking, status=Payment.Status.SUCCESS).update(
        status=Payment.Status.REFUNDED, updated_at=timezone.now()
    )
    PayoutLedger.objects.filter(booking=booking).exclude(status=PayoutLedger.Status.PAID).update(
        status=PayoutLedger.Status.VOID
    )

    logger.info("Booking %s cancelled by %s", booking.pk, user.pk)
    return booking


@transaction.atomic
def complete_past_bookings(*, today: Optional[date] = None) -> int:
    """Mark confirmed bookings dated before `today` as completed. Returns the count."""
    today = today or timezone.localdate()
    count = Booking.objects.filter(
        status=Booking.Status.CONFIRMED, booking_date__lt=today
    ).update(status=Booking.Status.COMPLETED, updated_at=timezone.now())
    if count:
        logger.info("Marked %s past booking(s) completed", count)
    return count
