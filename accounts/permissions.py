# accounts/permissions.py
from functools import wraps

from django.contrib.auth import get_user_model
from django.contrib.auth.mixins import AccessMixin
from django.contrib.auth.views import redirect_to_login
from django.core.exceptions import PermissionDenied

User = get_user_model()


def is_admin_like(user: User) -> bool:
    return bool(user.is_authenticated and (user.is_superuser or getattr(user, "role", None) == "admin"))


def has_role(user: User, *roles: str) -> bool:
    if not user.is_authenticated:
        return False
    if "admin" in roles and user.is_superuser:
        return True
    return getattr(user, "role", None) in roles


def role_required(*roles: str):
    """
    Gate a function view by role.
    Anonymous users go to login, wrong-role users get a 403.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return redirect_to_login(request.get_full_path())
            if not has_role(user, *roles):
                raise PermissionDenied("You do not have access to this page.")
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


admin_required = role_required("admin")


class RoleRequiredMixin(AccessMixin):
    """CBV counterpart of role_required. Set `allowed_roles` on the view."""
    allowed_roles: tuple = ()

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        if not has_role(request.user, *self.allowed_roles):
            raise PermissionDenied("You do not have access to this page.")
        return super().dispatch(request, *args, **kwargs)
