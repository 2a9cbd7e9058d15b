import shutil
import tempfile
from datetime import time, timedelta
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from bookings.models import Booking
from bookings.services import book_slot
from turfs.models import Turf, TurfImage, TurfSlot
from .utils import PASSWORD, gif, make_slot, make_turf, make_user, tomorrow

MEDIA_ROOT = tempfile.mkdtemp()


class TurfIndexTests(TestCase):
    def setUp(self):
        owner = make_user("owner", role="owner")
        self.football = make_turf(owner, name="Kick Off", city="Pune", area="Baner")
        self.cricket = make_turf(
            owner, name="Boundary Line", city="Mumbai", area="Andheri", sport_type=Turf.Sport.CRICKET
        )
        self.pending = make_turf(owner, name="Not Yet", status=Turf.Status.PENDING)

    def names(self, response):
        return {t.name for t in response.context["turfs"]}

    def test_lists_only_approved(self):
        response = self.client.get(reverse("turfs:index"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.names(response), {"Kick Off", "Boundary Line"})
        self.assertNotContains(response, "Not Yet")

    def test_search_by_name_or_area(self):
        self.assertEqual(self.names(self.client.get(reverse("turfs:index"), {"q": "kick"})), {"Kick Off"})
        self.assertEqual(self.names(self.client.get(reverse("turfs:index"), {"q": "andheri"})), {"Boundary Line"})

    def test_filter_by_sport_and_city(self):
        response = self.client.get(reverse("turfs:index"), {"sport": "cricket"})
        self.assertEqual(self.names(response), {"Boundary Line"})
        response = self.client.get(reverse("turfs:index"), {"city": "Pune"})
        self.assertEqual(self.names(response), {"Kick Off"})

    def test_unknown_city_still_applies_search(self):
        response = self.client.get(reverse("turfs:index"), {"q": "boundary", "city": "Nowhere"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.names(response), {"Boundary Line"})

        response = self.client.get(reverse("turfs:index"), {"q": "no such turf", "city": "Nowhere"})
        self.assertEqual(self.names(response), set())

    def test_unknown_sport_keeps_city_filter(self):
        response = self.client.get(reverse("turfs:index"), {"sport": "curling", "city": "Mumbai"})
        self.assertEqual(self.names(response), {"Boundary Line"})

    def test_city_choices_come_from_approved_turfs(self):
        response = self.client.get(reverse("turfs:index"))
        self.assertEqual(response.context["cities"], ["Mumbai", "Pune"])


class TurfDetailTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner", role="owner")
        self.player = make_user("player")
        self.turf = make_turf(self.owner)
        self.day = tomorrow()
        self.slot = make_slot(self.turf, self.day)

    def url(self, turf=None):
        return reverse("turfs:turf_detail", args=[(turf or self.turf).pk])

    def test_shows_slots_for_selected_date(self):
        response = self.client.get(self.url(), {"date": self.day.isoformat()})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["selected_date"], self.day)
        self.assertEqual([a.slot for a in response.context["slots"]], [self.slot])
        self.assertContains(response, "18:00")

    def test_bad_or_past_date_falls_back_to_today(self):
        today = timezone.localdate()
        for raw in ("not-a-date", (today - timedelta(days=3)).isoformat()):
            response = self.client.get(self.url(), {"date": raw})
            self.assertEqual(response.context["selected_date"], today)

    def test_booked_slot_is_marked(self):
        book_slot(player=self.player, turf=self.turf, slot=self.slot, on_date=self.day)
        response = self.client.get(self.url(), {"date": self.day.isoformat()})
        self.assertTrue(response.context["slots"][0].is_booked)
        self.assertContains(response, "Booked")

    def test_book_button_only_for_players(self):
        self.client.login(username="player", password=PASSWORD)
        response = self.client.get(self.url(), {"date": self.day.isoformat()})
        self.assertTrue(response.context["can_book"])
        self.assertContains(response, reverse("bookings:book", args=[self.turf.pk]))

        self.client.login(username="owner", password=PASSWORD)
        response = self.client.get(self.url(), {"date": self.day.isoformat()})
        self.assertFalse(response.context["can_book"])

    def test_unapproved_turf_hidden_from_public(self):
        pending = make_turf(self.owner, name="Draft", status=Turf.Status.PENDING)

        self.assertEqual(self.client.get(self.url(pending)).status_code, 404)
        self.client.login(username="player", password=PASSWORD)
        self.assertEqual(self.client.get(self.url(pending)).status_code, 404)

    def test_unapproved_turf_visible_to_owner_and_admin(self):
        pending = make_turf(self.owner, name="Draft", status=Turf.Status.PENDING)
        make_user("boss", role="admin")

        self.client.login(username="owner", password=PASSWORD)
        response = self.client.get(self.url(pending))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["slots"], [])

        self.client.login(username="boss", password=PASSWORD)
        self.assertEqual(self.client.get(self.url(pending)).status_code, 200)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class OwnerTurfTests(TestCase):
    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.owner = make_user("owner", role="owner")
        self.client.login(username="owner", password=PASSWORD)

    def turf_data(self, **extra):
        data = {
            "name": "Night Lights",
            "description": "Five-a-side pitch",
            "city": "Pune",
            "area": "Kothrud",
            "address": "Lane 4",
            "sport_type": "football",
            "amenities": ["WiFi", "Parking"],
            "hourly_price": "1200",
        }
        data.update(extra)
        return data

    def test_dashboard_requires_owner(self):
        self.assertEqual(self.client.get(reverse("turfs:owner_dashboard")).status_code, 200)

        make_user("player")
        self.client.login(username="player", password=PASSWORD)
        self.assertEqual(self.client.get(reverse("turfs:owner_dashboard")).status_code, 403)

        self.client.logout()
        response = self.client.get(reverse("turfs:owner_dashboard"))
        self.assertRedirects(response, f"{reverse('accounts:login')}?next={reverse('turfs:owner_dashboard')}")

    def test_new_turf_is_pending(self):
        response = self.client.post(reverse("turfs:turf_new"), self.turf_data())
        self.assertRedirects(response, reverse("turfs:owner_dashboard"))

        turf = Turf.objects.get(name="Night Lights")
        self.assertEqual(turf.owner, self.owner)
        self.assertEqual(turf.status, Turf.Status.PENDING)
        self.assertEqual(turf.amenities, ["Parking", "WiFi"])
        self.assertEqual(turf.hourly_price, Decimal("1200"))

    def test_status_cannot_be_posted(self):
        self.client.post(reverse("turfs:turf_new"), self.turf_data(status="approved"))
        self.assertEqual(Turf.objects.get().status, Turf.Status.PENDING)

    def test_new_turf_with_photo(self):
        self.client.post(reverse("turfs:turf_new"), self.turf_data(photos=[gif("a.gif"), gif("b.gif")]))
        turf = Turf.objects.get()
        self.assertEqual(list(turf.images.values_list("display_order", flat=True)), [0, 1])

    @override_settings(TURF_MAX_IMAGES=1)
    def test_photo_limit(self):
        response = self.client.post(reverse("turfs:turf_new"), self.turf_data(photos=[gif("a.gif"), gif("b.gif")]))
        self.assertEqual(response.status_code, 200)
        self.assertFormError(response.context["form"], "photos", "Max 1 photos allowed.")
        self.assertFalse(Turf.objects.exists())

    @override_settings(TURF_MAX_IMAGES=2)
    def test_photo_limit_counts_existing_images(self):
        turf = make_turf(self.owner)
        TurfImage.objects.create(turf=turf, image=gif("old.gif"), display_order=0)

        response = self.client.post(
            reverse("turfs:turf_edit", args=[turf.pk]),
            self.turf_data(photos=[gif("a.gif"), gif("b.gif")]),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(turf.images.count(), 1)

    def test_edit_keeps_status(self):
        turf = make_turf(self.owner)
        response = self.client.post(reverse("turfs:turf_edit", args=[turf.pk]), self.turf_data(name="Renamed"))
        self.assertRedirects(response, reverse("turfs:owner_dashboard"))
        turf.refresh_from_db()
        self.assertEqual(turf.name, "Renamed")
        self.assertEqual(turf.status, Turf.Status.APPROVED)

    def test_cannot_edit_someone_elses_turf(self):
        theirs = make_turf(make_user("rival", role="owner"))
        self.assertEqual(self.client.get(reverse("turfs:turf_edit", args=[theirs.pk])).status_code, 404)

    def test_delete_photo(self):
        turf = make_turf(self.owner)
        image = TurfImage.objects.create(turf=turf, image=gif(), display_order=0)
        response = self.client.post(reverse("turfs:turf_image_delete", args=[turf.pk, image.pk]))
        self.assertRedirects(response, reverse("turfs:turf_edit", args=[turf.pk]))
        self.assertFalse(TurfImage.objects.exists())

    def test_toggle_active(self):
        turf = make_turf(self.owner)
        url = reverse("turfs:turf_toggle_active", args=[turf.pk])

        self.client.post(url)
        turf.refresh_from_db()
        self.assertEqual(turf.status, Turf.Status.DEACTIVATED)

        self.client.post(url)
        turf.refresh_from_db()
        self.assertEqual(turf.status, Turf.Status.APPROVED)

    def test_pending_turf_cannot_be_toggled(self):
        turf = make_turf(self.owner, status=Turf.Status.PENDING)
        self.client.post(reverse("turfs:turf_toggle_active", args=[turf.pk]))
        turf.refresh_from_db()
        self.assertEqual(turf.status, Turf.Status.PENDING)

    def test_dashboard_totals(self):
        turf = make_turf(self.owner)
        day = tomorrow()
        slot = make_slot(turf, day)
        book_slot(player=make_user("player"), turf=turf, slot=slot, on_date=day)

        response = self.client.get(reverse("turfs:owner_dashboard"))
        self.assertEqual(response.context["total_earnings"], Decimal("900.00"))
        self.assertEqual(response.context["total_commission"], Decimal("100.00"))
        self.assertEqual(response.context["total_bookings"], 1)


class OwnerSlotTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner", role="owner")
        self.turf = make_turf(self.owner)
        self.url = reverse("turfs:turf_slots", args=[self.turf.pk])
        self.client.login(username="owner", password=PASSWORD)

    def test_add_slot(self):
        response = self.client.post(
            self.url, {"day_of_week": 1, "start_time": "06:00", "end_time": "07:00", "price_override": ""}
        )
        self.assertRedirects(response, self.url)
        slot = TurfSlot.objects.get(turf=self.turf)
        self.assertEqual((slot.day_of_week, slot.start_time), (1, time(6)))
        self.assertIsNone(slot.price_override)

    def test_end_must_follow_start(self):
        response = self.client.post(self.url, {"day_of_week": 1, "start_time": "07:00", "end_time": "06:00"})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(TurfSlot.objects.exists())

    def test_duplicate_start_refused(self):
        TurfSlot.objects.create(turf=self.turf, day_of_week=1, start_time=time(6), end_time=time(7))
        response = self.client.post(self.url, {"day_of_week": 1, "start_time": "06:00", "end_time": "08:00"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(TurfSlot.objects.count(), 1)

    def test_toggle_slot(self):
        slot = TurfSlot.objects.create(turf=self.turf, day_of_week=1, start_time=time(6), end_time=time(7))
        self.client.post(reverse("turfs:turf_slot_toggle", args=[self.turf.pk, slot.pk]))
        slot.refresh_from_db()
        self.assertFalse(slot.is_active)

    def test_delete_unused_slot(self):
        slot = TurfSlot.objects.create(turf=self.turf, day_of_week=1, start_time=time(6), end_time=time(7))
        self.client.post(reverse("turfs:turf_slot_delete", args=[self.turf.pk, slot.pk]))
        self.assertFalse(TurfSlot.objects.exists())

    def test_booked_slot_is_protected(self):
        day = tomorrow()
        slot = make_slot(self.turf, day)
        book_slot(player=make_user("player"), turf=self.turf, slot=slot, on_date=day)

        self.client.post(reverse("turfs:turf_slot_delete", args=[self.turf.pk, slot.pk]))
        self.assertTrue(TurfSlot.objects.filter(pk=slot.pk).exists())
        self.assertEqual(Booking.objects.count(), 1)

    def test_other_owner_gets_404(self):
        make_user("rival", role="owner")
        self.client.login(username="rival", password=PASSWORD)
        self.assertEqual(self.client.get(self.url).status_code, 404)
