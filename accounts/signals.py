from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Profile, User


@receiver(pre_save, sender=User, dispatch_uid="accounts_prepare_user")
def prepare_user(sender, instance: User, **kwargs):
    """Lowercase the email and pin superusers to the admin role before the row hits the check constraint."""
    if instance.email:
        instance.email = instance.email.strip().lower()
    if instance.is_superuser:
        instance.role = User.Roles.ADMIN


@receiver(post_save, sender=User, dispatch_uid="accounts_create_profile")
def create_profile(sender, instance: User, created, **kwargs):
    # every account gets a profile; the name starts out as the user's own
    if created:
        Profile.objects.get_or_create(user=instance, defaults={"full_name": instance.get_full_name()})
