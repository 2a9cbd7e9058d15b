# bookings/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Booking
from .services import record_payout


@receiver(post_save, sender=Booking, dispatch_uid="bookings_record_payout")
def create_payout_for_confirmed_booking(sender, instance: Booking, created, **kwargs):
    """
    Confirmed bookings credit the turf owner right away.
    Only fires on insert; status changes later are handled by the services.
    """
    if not created or instance.status != Booking.Status.CONFIRMED:
        return
    record_payout(instance, rate=getattr(instance, "applied_commission_rate", None))
