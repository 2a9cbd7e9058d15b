from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models
from django.db.models import Q


class UserManager(DjangoUserManager):
    """Lowercases emails and hands out the right default role."""

    use_in_migrations = True

    @staticmethod
    def _clean_email(email):
        return email.strip().lower() if email else email

    def create_user(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Roles.PLAYER)
        return super().create_user(username, self._clean_email(email), password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        role = extra_fields.setdefault("role", User.Roles.ADMIN)
        if role != User.Roles.ADMIN:
            raise ValueError("Superusers always have the admin role.")
        return super().create_superuser(username, self._clean_email(email), password, **extra_fields)


class User(AbstractUser):
    """
    Marketplace account with a single role.
    Players book slots, owners list turfs, admins approve listings.
    """
    class Roles(models.TextChoices):
        ADMIN = "admin", "Admin"
        OWNER = "owner", "Turf owner"
        PLAYER = "player", "Player"

    role = models.CharField(max_length=20, choices=Roles.choices, default=Roles.PLAYER, db_index=True)

    objects = UserManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                name="superuser_requires_admin_role",
                condition=Q(is_superuser=False) | Q(role="admin"),
            ),
        ]

    def __str__(self) -> str:
        return f"{self.username} [{self.role}]"

    @property
    def display_name(self) -> str:
        profile = getattr(self, "profile", None)
        if profile is not None and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username


class Profile(models.Model):
    """Account metadata shown on the profile page."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    city = models.CharField(max_length=100, blank=True)
    avatar = models.ImageField(upload_to="avatars/", null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.full_name or self.user.username


class RoleChangeLog(models.Model):
    """Audit trail for role changes made from the backoffice."""

    target = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="role_history")
    changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="role_changes_made")
    old_role = models.CharField(max_length=20, choices=User.Roles.choices)
    new_role = models.CharField(max_length=20, choices=User.Roles.choices)
    reason = models.CharField(max_length=255, blank=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-changed_at"]
        indexes = [
            models.Index(fields=["changed_at"], name="rolelog_changed_at_idx"),
            models.Index(fields=["old_role", "new_role"], name="rolelog_roles_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.target.username}: {self.old_role} → {self.new_role} by {self.changed_by.username}"
