# accounts/views_admin.py
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.core.paginator import Paginator
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from .forms import AdminRoleUpdateForm
from .permissions import admin_required
from .services import change_role

User = get_user_model()

PAGE_SIZE = 25


def _safe_next(request):
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return None


@admin_required
def users_list(request):
    """Searchable user directory with an inline role switcher per row."""
    filters = {
        "q": (request.GET.get("q") or "").strip(),
        "role": request.GET.get("role") or "",
        "active": request.GET.get("active") or "",
    }

    users = User.objects.select_related("profile").order_by("username")
    if filters["q"]:
        term = filters["q"]
        users = users.filter(
            Q(username__icontains=term) | Q(email__icontains=term) | Q(profile__full_name__icontains=term)
        )
    if filters["role"] in User.Roles.values:
        users = users.filter(role=filters["role"])
    if filters["active"] in ("0", "1"):
        users = users.filter(is_active=filters["active"] == "1")

    context = {
        "page": Paginator(users, PAGE_SIZE).get_page(request.GET.get("page")),
        "filters": filters,
        "roles_choices": User.Roles.choices,
        "roles_summary": users.values("role").annotate(total=Count("id")).order_by("role"),
    }
    return render(request, "accounts/admin_users_list.html", context)


@admin_required
@require_http_methods(["GET", "POST"])
def change_user_role(request, user_id):
    target = get_object_or_404(User, pk=user_id)
    form = AdminRoleUpdateForm(
        target_user=target,
        acting_user=request.user,
        data=request.POST if request.method == "POST" else None,
        initial={"role": target.role},
    )

    if request.method == "POST":
        if form.is_valid():
            change_role(
                target=target,
                new_role=form.cleaned_data["role"],
                changed_by=request.user,
                reason=form.cleaned_data["reason"],
            )
            messages.success(request, f"{target.username} is now {target.get_role_display().lower()}.")
            return redirect(_safe_next(request) or "accounts:users_list")
        messages.error(request, "Role not changed.")

    return render(request, "accounts/change_user_role.html", {"form": form, "target": target})
