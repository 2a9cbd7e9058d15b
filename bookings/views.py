from __future__ import annotations

from datetime import date

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_POST

from accounts.permissions import is_admin_like, role_required
from turfs.models import Turf, TurfSlot
from .models import Booking
from .services import book_slot, cancel_booking


def _error_text(exc: ValidationError) -> str:
    return " ".join(exc.messages)


@role_required("player")
@require_POST
def book_slot_view(request, turf_pk: int):
    turf = get_object_or_404(Turf, pk=turf_pk)
    raw_date = request.POST.get("date") or ""
    back = f"{reverse('turfs:turf_detail', args=[turf.pk])}?date={raw_date}"

    try:
        slot_pk = int(request.POST.get("slot") or "")
    except ValueError:
        messages.error(request, "Pick a slot.")
        return redirect(back)
    slot = get_object_or_404(TurfSlot, pk=slot_pk, turf=turf)

    try:
        on_date = date.fromisoformat(raw_date)
    except ValueError:
        messages.error(request, "Pick a valid date.")
        return redirect(back)

    try:
        booking = book_slot(player=request.user, turf=turf, slot=slot, on_date=on_date)
    except ValidationError as exc:
        messages.error(request, f"Booking failed: {_error_text(exc)}")
        return redirect(back)

    messages.success(
        request,
        f"Booking confirmed! Your slot is booked for {booking.booking_date:%B %d, %Y}.",
    )
    return redirect(back)


@role_required("player")
def player_dashboard(request):
    today = timezone.localdate()
    bookings = list(
        Booking.objects.filter(player=request.user)
        .select_related("turf", "slot", "payment")
        .order_by("-booking_date", "-created_at")
    )
    upcoming = [b for b in bookings if b.status == Booking.Status.CONFIRMED and b.booking_date >= today]
    past = [b for b in bookings if not (b.status == Booking.Status.CONFIRMED and b.booking_date >= today)]
    return render(
        request,
        "bookings/player_dashboard.html",
        {"upcoming": upcoming, "past": past, "today": today},
    )


@role_required("player", "admin")
@require_POST
def cancel_booking_view(request, pk: int):
    booking = get_object_or_404(Booking, pk=pk)
    if booking.player_id != request.user.pk and not is_admin_like(request.user):
        raise Http404("Booking not found")

    try:
        cancel_booking(booking=booking, user=request.user)
    except ValidationError as exc:
        messages.error(request, f"Failed to cancel: {_error_text(exc)}")
    else:
        messages.success(request, "Booking cancelled.")

    if is_admin_like(request.user):
        return redirect("backoffice:dashboard")
    return redirect("bookings:player_dashboard")
