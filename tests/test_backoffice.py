from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from accounts.models import User
from bookings.services import book_slot, cancel_booking
from turfs.models import Turf
from .utils import PASSWORD, make_slot, make_turf, make_user, tomorrow


class BackofficeAccessTests(TestCase):
    def test_admin_only(self):
        url = reverse("backoffice:dashboard")

        response = self.client.get(url)
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.url.startswith(reverse("accounts:login")))

        for username, role in (("player", "player"), ("owner", "owner")):
            make_user(username, role=role)
            self.client.login(username=username, password=PASSWORD)
            self.assertEqual(self.client.get(url).status_code, 403)

        make_user("boss", role="admin")
        self.client.login(username="boss", password=PASSWORD)
        self.assertEqual(self.client.get(url).status_code, 200)

    def test_superuser_counts_as_admin(self):
        User.objects.create_superuser("root", "root@example.com", PASSWORD)
        self.client.login(username="root", password=PASSWORD)
        self.assertEqual(self.client.get(reverse("backoffice:dashboard")).status_code, 200)


class BackofficeDashboardTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner", role="owner")
        make_user("boss", role="admin")
        self.client.login(username="boss", password=PASSWORD)

    def test_pending_turfs_oldest_first(self):
        first = make_turf(self.owner, name="First", status=Turf.Status.PENDING)
        second = make_turf(self.owner, name="Second", status=Turf.Status.PENDING)
        make_turf(self.owner, name="Live")

        response = self.client.get(reverse("backoffice:dashboard"))
        self.assertEqual(list(response.context["pending_turfs"]), [first, second])
        self.assertEqual(response.context["kpi"]["pending"], 2)

    def test_totals_ignore_cancelled_bookings(self):
        turf = make_turf(self.owner)
        day = tomorrow()
        slot = make_slot(turf, day)
        player = make_user("player")
        booking = book_slot(player=player, turf=turf, slot=slot, on_date=day)

        kpi = self.client.get(reverse("backoffice:dashboard")).context["kpi"]
        self.assertEqual(kpi["revenue"], Decimal("1000.00"))
        self.assertEqual(kpi["commission"], Decimal("100.00"))
        self.assertEqual(kpi["bookings"], 1)

        cancel_booking(booking=booking, user=player)
        kpi = self.client.get(reverse("backoffice:dashboard")).context["kpi"]
        self.assertEqual(kpi["revenue"], 0)
        self.assertEqual(kpi["commission"], 0)
        self.assertEqual(kpi["bookings"], 1)


class DecideTurfTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner", role="owner")
        self.turf = make_turf(self.owner, status=Turf.Status.PENDING)
        make_user("boss", role="admin")
        self.client.login(username="boss", password=PASSWORD)

    def decide(self, action, turf=None):
        return self.client.post(reverse("backoffice:decide_turf", args=[(turf or self.turf).pk, action]))

    def test_approve(self):
        with self.assertLogs("backoffice.views", level="INFO"):
            response = self.decide("approve")
        self.assertRedirects(response, reverse("backoffice:dashboard"))
        self.turf.refresh_from_db()
        self.assertEqual(self.turf.status, Turf.Status.APPROVED)

        listing = self.client.get(reverse("turfs:index"))
        self.assertIn(self.turf, list(listing.context["turfs"]))

    def test_reject(self):
        self.decide("reject")
        self.turf.refresh_from_db()
        self.assertEqual(self.turf.status, Turf.Status.REJECTED)

    def test_only_pending_can_be_decided(self):
        self.turf.status = Turf.Status.REJECTED
        self.turf.save()
        self.decide("approve")
        self.turf.refresh_from_db()
        self.assertEqual(self.turf.status, Turf.Status.REJECTED)

    def test_unknown_action(self):
        self.decide("promote")
        self.turf.refresh_from_db()
        self.assertEqual(self.turf.status, Turf.Status.PENDING)

    def test_requires_post(self):
        url = reverse("backoffice:decide_turf", args=[self.turf.pk, "approve"])
        self.assertEqual(self.client.get(url).status_code, 405)

    def test_owner_cannot_approve_own_turf(self):
        self.client.login(username="owner", password=PASSWORD)
        self.assertEqual(self.decide("approve").status_code, 403)
        self.turf.refresh_from_db()
        self.assertEqual(self.turf.status, Turf.Status.PENDING)
