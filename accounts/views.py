# accounts/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model, login, logout
from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.csrf import csrf_protect

from .context_processors import dashboard_url_for
from .forms import LoginForm, ProfileForm, RegisterForm
from .models import Profile

User = get_user_model()
logger = logging.getLogger(__name__)


class LoginThrottle:
    """
    Failed sign-in counter per (ip, username) kept in the cache.
    Reaching LOGIN_RATE_LIMIT_ATTEMPTS locks that pair for the lockout window.
    """

    def __init__(self, request, username):
        ip = request.META.get("REMOTE_ADDR", "0.0.0.0")
        self.username = username
        self.ip = ip
        self.attempts_key = f"login:attempts:{ip}:{username}"
        self.lock_key = f"login:lock:{ip}:{username}"
        self.window = settings.LOGIN_RATE_LIMIT_LOCKOUT_MINUTES * 60

    @property
    def locked(self) -> bool:
        return cache.get(self.lock_key) is not None

    def fail(self):
        count = cache.get(self.attempts_key, 0) + 1
        cache.set(self.attempts_key, count, self.window)
        if count >= settings.LOGIN_RATE_LIMIT_ATTEMPTS:
            cache.set(self.lock_key, True, self.window)
            logger.warning("Locked sign-in for %s from %s after %s failures", self.username, self.ip, count)

    def reset(self):
        cache.delete_many([self.attempts_key, self.lock_key])


@csrf_protect
def register_view(request):
    if request.user.is_authenticated:
        return redirect(dashboard_url_for(request.user))

    if request.method != "POST":
        initial = {"role": User.Roles.OWNER} if request.GET.get("as") == "owner" else None
        return render(request, "accounts/register.html", {"form": RegisterForm(initial=initial)})

    form = RegisterForm(request.POST)
    if not form.is_valid():
        return render(request, "accounts/register.html", {"form": form})

    user = form.save()
    logger.info("Registered %s as %s", user.username, user.role)
    messages.success(request, "Account created! Sign in to continue.")
    return redirect("accounts:login")


@csrf_protect
def login_view(request):
    next_url = request.POST.get("next") or request.GET.get("next")
    form = LoginForm(request, data=request.POST or None)

    if request.method == "POST":
        throttle = LoginThrottle(request, request.POST.get("username", "").strip().lower())
        if throttle.locked:
            messages.error(request, "Too many attempts. Try again later.")
            return render(request, "accounts/login.html", {"form": LoginForm(request), "next": next_url})

        if form.is_valid():
            throttle.reset()
            user = form.get_user()
            login(request, user)
            messages.success(request, f"Welcome back, {user.display_name}!")
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect(dashboard_url_for(user))
        throttle.fail()

    return render(request, "accounts/login.html", {"form": form, "next": next_url})


@login_required
@csrf_protect
def logout_view(request):
    if request.method != "POST":
        return render(request, "accounts/logout_confirm.html")
    logout(request)
    messages.info(request, "Signed out.")
    return redirect("turfs:index")


@login_required
@csrf_protect
def profile_view(request):
    profile, _ = Profile.objects.get_or_create(user=request.user)

    if request.method == "POST" and request.POST.get("action") == "remove_avatar":
        if profile.avatar:
            profile.avatar.delete(save=False)
        profile.avatar = None
        profile.save(update_fields=["avatar", "updated_at"])
        messages.success(request, "Photo removed.")
        return redirect("accounts:profile")

    form = ProfileForm(request.POST or None, request.FILES or None, instance=profile)
    if request.method == "POST":
        if form.is_valid():
            form.save()
            messages.success(request, "Profile saved.")
            return redirect("accounts:profile")
        messages.error(request, "Please fix the highlighted fields.")

    return render(request, "accounts/profile.html", {"form": form, "profile": profile})
