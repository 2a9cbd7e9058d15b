from django.urls import reverse

from .permissions import is_admin_like


def dashboard_url_for(user) -> str:
    role = getattr(user, "role", "")
    if user.is_superuser or role == "admin":
        return reverse("backoffice:dashboard")
    if role == "owner":
        return reverse("turfs:owner_dashboard")
    return reverse("bookings:player_dashboard")


def menu_context(request):
    """
    Inject a gated menu to templates. base.html iterates this.
    """
    user = request.user
    authed = user.is_authenticated
    items = [
        {"label": "Explore turfs", "url": reverse("turfs:index"), "visible": True},
        {"label": "Dashboard", "url": dashboard_url_for(user) if authed else "", "visible": authed},
        {"label": "Users", "url": reverse("accounts:users_list"), "visible": is_admin_like(user)},
        {"label": "Profile", "url": reverse("accounts:profile"), "visible": authed},
        {"label": "Sign in", "url": reverse("accounts:login"), "visible": not authed},
        {"label": "Get started", "url": reverse("accounts:register"), "visible": not authed},
    ]
    return {"nav_items": [i for i in items if i["visible"]]}
