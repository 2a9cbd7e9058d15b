from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse

from accounts.models import Profile, RoleChangeLog, User
from accounts.permissions import is_admin_like
from .utils import PASSWORD, make_user


class UserModelTests(TestCase):
    def test_default_role_is_player(self):
        user = User.objects.create_user("newbie", "NewBie@Example.com ", PASSWORD)
        self.assertEqual(user.role, User.Roles.PLAYER)
        self.assertEqual(user.email, "newbie@example.com")

    def test_profile_created_with_account(self):
        user = User.objects.create_user("ravi", "ravi@example.com", PASSWORD, first_name="Ravi", last_name="K")
        self.assertEqual(user.profile.full_name, "Ravi K")
        self.assertEqual(user.display_name, "Ravi K")

    def test_superuser_is_admin(self):
        root = User.objects.create_superuser("root", "root@example.com", PASSWORD)
        self.assertEqual(root.role, User.Roles.ADMIN)
        self.assertTrue(is_admin_like(root))


class MenuTests(TestCase):
    def labels(self, response):
        return [item["label"] for item in response.context["nav_items"]]

    def test_anonymous_menu(self):
        labels = self.labels(self.client.get(reverse("turfs:index")))
        self.assertIn("Sign in", labels)
        self.assertNotIn("Users", labels)

    def test_users_link_only_for_admins(self):
        make_user("player")
        make_user("boss", role="admin")

        self.client.login(username="player", password=PASSWORD)
        self.assertNotIn("Users", self.labels(self.client.get(reverse("turfs:index"))))

        self.client.login(username="boss", password=PASSWORD)
        self.assertIn("Users", self.labels(self.client.get(reverse("turfs:index"))))


class RegisterTests(TestCase):
    def data(self, **extra):
        data = {
            "username": "meera",
            "email": "meera@example.com",
            "full_name": "Meera Shah",
            "role": "player",
            "password1": PASSWORD,
            "password2": PASSWORD,
        }
        data.update(extra)
        return data

    def test_register_player(self):
        response = self.client.post(reverse("accounts:register"), self.data())
        self.assertRedirects(response, reverse("accounts:login"))

        user = User.objects.get(username="meera")
        self.assertEqual(user.role, User.Roles.PLAYER)
        self.assertEqual(user.profile.full_name, "Meera Shah")

    def test_register_owner(self):
        self.client.post(reverse("accounts:register"), self.data(role="owner"))
        self.assertEqual(User.objects.get(username="meera").role, User.Roles.OWNER)

    def test_cannot_self_register_as_admin(self):
        response = self.client.post(reverse("accounts:register"), self.data(role="admin"))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(username="meera").exists())

    def test_duplicate_email(self):
        make_user("meera2")
        response = self.client.post(
            reverse("accounts:register"), self.data(email="MEERA2@example.com")
        )
        self.assertFormError(response.context["form"], "email", "This email is already in use.")

    def test_owner_signup_link_preselects_role(self):
        response = self.client.get(reverse("accounts:register"), {"as": "owner"})
        self.assertEqual(response.context["form"].initial["role"], User.Roles.OWNER)


class LoginTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_login_by_email_lands_on_role_dashboard(self):
        make_user("owner", role="owner")
        response = self.client.post(
            reverse("accounts:login"), {"username": "owner@example.com", "password": PASSWORD}
        )
        self.assertRedirects(response, reverse("turfs:owner_dashboard"))

    def test_player_lands_on_bookings(self):
        make_user("player")
        response = self.client.post(reverse("accounts:login"), {"username": "player", "password": PASSWORD})
        self.assertRedirects(response, reverse("bookings:player_dashboard"))

    def test_next_is_honoured(self):
        make_user("player")
        response = self.client.post(
            reverse("accounts:login"),
            {"username": "player", "password": PASSWORD, "next": reverse("turfs:index")},
        )
        self.assertRedirects(response, reverse("turfs:index"))

    def test_lockout_after_repeated_failures(self):
        make_user("player")
        for _ in range(5):
            self.client.post(reverse("accounts:login"), {"username": "player", "password": "nope"})
        response = self.client.post(reverse("accounts:login"), {"username": "player", "password": PASSWORD})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Too many attempts")

    def test_logout_requires_post(self):
        make_user("player")
        self.client.login(username="player", password=PASSWORD)
        self.assertEqual(self.client.get(reverse("accounts:logout")).status_code, 200)
        self.client.post(reverse("accounts:logout"))
        self.assertEqual(self.client.get(reverse("bookings:player_dashboard")).status_code, 302)


class ProfileTests(TestCase):
    def test_update_profile(self):
        user = make_user("player")
        self.client.login(username="player", password=PASSWORD)
        response = self.client.post(
            reverse("accounts:profile"), {"full_name": "Arjun P", "phone": "9999999999", "city": "Pune"}
        )
        self.assertRedirects(response, reverse("accounts:profile"))
        profile = Profile.objects.get(user=user)
        self.assertEqual((profile.full_name, profile.city), ("Arjun P", "Pune"))


class RoleManagementTests(TestCase):
    def setUp(self):
        self.admin = make_user("boss", role="admin")
        self.player = make_user("player")
        self.client.login(username="boss", password=PASSWORD)

    def change(self, user, role, **extra):
        return self.client.post(
            reverse("accounts:change_user_role", args=[user.pk]), {"role": role, **extra}
        )

    def test_users_list_filters(self):
        make_user("owner", role="owner")
        response = self.client.get(reverse("accounts:users_list"), {"role": "owner"})
        self.assertEqual([u.username for u in response.context["page"].object_list], ["owner"])

    def test_users_list_admin_only(self):
        self.client.login(username="player", password=PASSWORD)
        self.assertEqual(self.client.get(reverse("accounts:users_list")).status_code, 403)

    def test_change_role_is_logged(self):
        response = self.change(self.player, "owner", reason="Runs a turf now")
        self.assertRedirects(response, reverse("accounts:users_list"))

        self.player.refresh_from_db()
        self.assertEqual(self.player.role, User.Roles.OWNER)
        log = RoleChangeLog.objects.get(target=self.player)
        self.assertEqual((log.changed_by, log.old_role, log.new_role), (self.admin, "player", "owner"))
        self.assertEqual(log.reason, "Runs a turf now")

    def test_cannot_change_own_role(self):
        self.change(self.admin, "player")
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, User.Roles.ADMIN)
        self.assertFalse(RoleChangeLog.objects.exists())

    def test_superuser_stays_admin(self):
        root = User.objects.create_superuser("root", "root@example.com", PASSWORD)
        self.change(root, "player")
        root.refresh_from_db()
        self.assertEqual(root.role, User.Roles.ADMIN)
