import logging

from django.contrib import messages
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from accounts.models import User
from accounts.permissions import admin_required
from bookings.models import Booking, PayoutLedger
from turfs.models import Turf

logger = logging.getLogger(__name__)

DECISIONS = {
    "approve": Turf.Status.APPROVED,
    "reject": Turf.Status.REJECTED,
}


@admin_required
def dashboard(request):
    pending_turfs = (
        Turf.objects.filter(status=Turf.Status.PENDING)
        .select_related("owner")
        .order_by("created_at", "pk")
    )
    bookings = (
        Booking.objects.select_related("turf", "slot", "player")
        .order_by("-created_at")[:100]
    )
    totals = (
        PayoutLedger.objects.exclude(status=PayoutLedger.Status.VOID)
        .aggregate(revenue=Sum("total_amount"), commission=Sum("commission_amount"))
    )
    by_role = User.objects.values("role").annotate(total=Count("id")).order_by("role")

    context = {
        "pending_turfs": pending_turfs,
        "bookings": bookings,
        "by_role": by_role,
        "today": timezone.localdate(),
        "kpi": {
            "revenue": totals["revenue"] or 0,
            "commission": totals["commission"] or 0,
            "bookings": Booking.objects.count(),
            "pending": pending_turfs.count(),
        },
    }
    return render(request, "backoffice/dashboard.html", context)


@admin_required
@require_POST
def decide_turf(request, pk: int, action: str):
    """Approve or reject a pending listing."""
    new_status = DECISIONS.get(action)
    if new_status is None:
        messages.error(request, "Unknown action.")
        return redirect("backoffice:dashboard")

    turf = get_object_or_404(Turf, pk=pk)
    if turf.status != Turf.Status.PENDING:
        messages.error(request, f"“{turf.name}” has already been {turf.get_status_display().lower()}.")
        return redirect("backoffice:dashboard")

    turf.status = new_status
    turf.save(update_fields=["status", "updated_at"])
    logger.info("Turf %s %s by %s", turf.pk, turf.status, request.user.username)
    messages.success(request, f"“{turf.name}” {turf.get_status_display().lower()}.")
    return redirect("backoffice:dashboard")
