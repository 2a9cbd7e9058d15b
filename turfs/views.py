from __future__ import annotations

import logging
from datetime import date

from django.contrib import messages
from django.db.models import Prefetch, ProtectedError, Q, Sum
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.generic import CreateView, ListView, UpdateView, View

from accounts.permissions import RoleRequiredMixin, has_role, is_admin_like
from bookings.models import Booking, PayoutLedger
from bookings.services import availability, day_of_week
from .forms import TurfForm, TurfSearchForm, TurfSlotForm
from .models import DAY_NAMES, Turf, TurfImage, TurfSlot

logger = logging.getLogger(__name__)


def _parse_date(raw: str | None) -> date:
    """?date=YYYY-MM-DD; anything missing, malformed or in the past means today."""
    today = timezone.localdate()
    if not raw:
        return today
    try:
        picked = date.fromisoformat(raw)
    except ValueError:
        return today
    return picked if picked >= today else today


# ---- Public ------------------------------------------------------------------

def index(request):
    """Browse approved turfs with search, sport and city filters."""
    approved = Turf.objects.filter(status=Turf.Status.APPROVED)
    cities = list(approved.order_by("city").values_list("city", flat=True).distinct())

    form = TurfSearchForm(request.GET or None, cities=cities)
    qs = approved.prefetch_related(
        Prefetch("images", queryset=TurfImage.objects.order_by("display_order", "id"))
    ).order_by("-created_at")

    if form.is_bound:
        # a stale city or sport drops only that filter; cleaned_data keeps the valid fields
        form.is_valid()
        q = form.cleaned_data.get("q", "").strip()
        sport = form.cleaned_data.get("sport")
        city = form.cleaned_data.get("city")
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(area__icontains=q))
        if sport:
            qs = qs.filter(sport_type=sport)
        if city:
            qs = qs.filter(city=city)

    return render(request, "turfs/index.html", {"form": form, "turfs": qs, "cities": cities})


def turf_detail(request, pk: int):
    turf = get_object_or_404(Turf.objects.select_related("owner"), pk=pk)

    # Unapproved listings are visible to their owner and admins only
    if turf.status != Turf.Status.APPROVED:
        user = request.user
        if not (user.is_authenticated and (turf.owner_id == user.pk or is_admin_like(user))):
            raise Http404("Turf not found")

    selected = _parse_date(request.GET.get("date"))
    slots = availability(turf, selected) if turf.is_bookable else []

    return render(
        request,
        "turfs/turf_detail.html",
        {
            "turf": turf,
            "images": turf.images.order_by("display_order", "id"),
            "selected_date": selected,
            "today": timezone.localdate(),
            "day_name": DAY_NAMES[day_of_week(selected)],
            "slots": slots,
            "can_book": bool(request.user.is_authenticated and getattr(request.user, "role", "") == "player"),
        },
    )


# ---- Owner -------------------------------------------------------------------

class OwnerRequiredMixin(RoleRequiredMixin):
    allowed_roles = ("owner",)


class OwnerTurfMixin(OwnerRequiredMixin):
    """Loads self.turf, limited to turfs the current owner actually owns."""

    def dispatch(self, request, *args, **kwargs):
        if has_role(request.user, *self.allowed_roles):
            self.turf = get_object_or_404(Turf, pk=kwargs["pk"], owner=request.user)
        return super().dispatch(request, *args, **kwargs)


class OwnerDashboardView(OwnerRequiredMixin, ListView):
    template_name = "turfs/owner/dashboard.html"
    context_object_name = "turfs"

    def get_queryset(self):
        return Turf.objects.filter(owner=self.request.user).order_by("-created_at")

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        user = self.request.user
        ctx["bookings"] = (
            Booking.objects.filter(turf__owner=user)
            .select_related("turf", "slot", "player")
            .order_by("-booking_date", "-created_at")[:50]
        )
        totals = (
            PayoutLedger.objects.filter(owner=user)
            .exclude(status=PayoutLedger.Status.VOID)
            .aggregate(earnings=Sum("owner_payout"), commission=Sum("commission_amount"))
        )
        ctx["total_earnings"] = totals["earnings"] or 0
        ctx["total_commission"] = totals["commission"] or 0
        ctx["total_bookings"] = Booking.objects.filter(turf__owner=user).count()
        return ctx


class TurfCreateView(OwnerRequiredMixin, CreateView):
    model = Turf
    form_class = TurfForm
    template_name = "turfs/owner/turf_form.html"

    def form_valid(self, form):
        form.instance.owner = self.request.user
        form.instance.status = Turf.Status.PENDING
        response = super().form_valid(form)
        form.save_photos(self.object)
        logger.info("Turf %s created by %s, awaiting approval", self.object.pk, self.request.user.username)
        messages.success(self.request, "Turf created! It will be visible after admin approval.")
        return response

    def get_success_url(self):
        return reverse("turfs:owner_dashboard")


class TurfUpdateView(OwnerTurfMixin, UpdateView):
    model = Turf
    form_class = TurfForm
    template_name = "turfs/owner/turf_form.html"

    def get_object(self, queryset=None):
        return self.turf

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        ctx["editing"] = True
        ctx["images"] = self.turf.images.all()
        return ctx

    def form_valid(self, form):
        response = super().form_valid(form)
        form.save_photos(self.object)
        messages.success(self.request, "Turf updated!")
        return response

    def form_invalid(self, form):
        messages.error(self.request, "Please correct the errors below and try again.")
        return super().form_invalid(form)

    def get_success_url(self):
        return reverse("turfs:owner_dashboard")


class TurfToggleActiveView(OwnerTurfMixin, View):
    """approved <-> deactivated. Pending or rejected listings can't be toggled."""

    def post(self, request, pk: int):
        turf = self.turf
        if turf.status == Turf.Status.APPROVED:
            turf.status = Turf.Status.DEACTIVATED
        elif turf.status == Turf.Status.DEACTIVATED:
            turf.status = Turf.Status.APPROVED
        else:
            messages.error(request, "Only approved turfs can be deactivated.")
            return redirect("turfs:owner_dashboard")
        turf.save(update_fields=["status", "updated_at"])
        logger.info("Turf %s is now %s", turf.pk, turf.status)
        messages.success(request, f"“{turf.name}” is now {turf.get_status_display().lower()}.")
        return redirect("turfs:owner_dashboard")


class TurfImageDeleteView(OwnerTurfMixin, View):
    def post(self, request, pk: int, image_pk: int):
        image = get_object_or_404(TurfImage, pk=image_pk, turf=self.turf)
        image.image.delete(save=False)
        image.delete()
        messages.success(request, "Photo removed.")
        return redirect("turfs:turf_edit", pk=self.turf.pk)


# ---- Slots -------------------------------------------------------------------

class TurfSlotsView(OwnerTurfMixin, View):
    template_name = "turfs/owner/slots.html"

    def _render(self, request, form):
        slots = TurfSlot.objects.filter(turf=self.turf).order_by("day_of_week", "start_time")
        by_day = [
            {"day": name, "slots": [s for s in slots if s.day_of_week == i]}
            for i, name in enumerate(DAY_NAMES)
        ]
        return render(
            request,
            self.template_name,
            {"turf": self.turf, "form": form, "slots_by_day": [d for d in by_day if d["slots"]]},
        )

    def get(self, request, pk: int):
        return self._render(request, TurfSlotForm(turf=self.turf))

    def post(self, request, pk: int):
        form = TurfSlotForm(request.POST, turf=self.turf)
        if form.is_valid():
            slot = form.save()
            messages.success(request, f"Slot added: {DAY_NAMES[slot.day_of_week]} {slot.label}.")
            return redirect("turfs:turf_slots", pk=self.turf.pk)
        messages.error(request, "Could not add the slot.")
        return self._render(request, form)


class TurfSlotToggleView(OwnerTurfMixin, View):
    def post(self, request, pk: int, slot_pk: int):
        slot = get_object_or_404(TurfSlot, pk=slot_pk, turf=self.turf)
        slot.is_active = not slot.is_active
        slot.save(update_fields=["is_active"])
        messages.success(request, f"Slot {slot.label} {'enabled' if slot.is_active else 'disabled'}.")
        return redirect("turfs:turf_slots", pk=self.turf.pk)


class TurfSlotDeleteView(OwnerTurfMixin, View):
    def post(self, request, pk: int, slot_pk: int):
        slot = get_object_or_404(TurfSlot, pk=slot_pk, turf=self.turf)
        try:
            slot.delete()
        except ProtectedError:
            messages.error(request, "This slot has bookings. Disable it instead of deleting.")
        else:
            messages.success(request, "Slot deleted.")
        return redirect("turfs:turf_slots", pk=self.turf.pk)
