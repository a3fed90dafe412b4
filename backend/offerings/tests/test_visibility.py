from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from django.test import TestCase, override_settings
from django.utils import timezone

from common.utils.clock import next_occurrence, parse_hhmm
from offerings.models import Offering
from services.offering_lifecycle import create_party, ended_at, ended_reason, is_live, live_q

from .utils import ctx_for, insert_soi, make_user, party_payload


class PartyWindowTests(TestCase):
	def setUp(self):
		self.host = make_user("host")
		self.now = timezone.now()
		self.party = create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=10))

	def test_party_is_live_until_duration_elapses(self):
		self.assertTrue(is_live(self.party, self.now + timedelta(minutes=9)))
		self.assertFalse(is_live(self.party, self.now + timedelta(minutes=11)))

	def test_party_window_ends_exactly_at_expiry(self):
		self.assertFalse(is_live(self.party, self.now + timedelta(minutes=10)))

	def test_inactive_party_is_not_live(self):
		self.party.is_active = False
		self.assertFalse(is_live(self.party, self.now + timedelta(minutes=1)))

	def test_live_q_agrees_with_is_live(self):
		for minutes in (0, 5, 9, 10, 11, 30):
			at = self.now + timedelta(minutes=minutes)
			in_query = Offering.objects.filter(live_q(at), pk=self.party.pk).exists()
			self.assertEqual(in_query, is_live(self.party, at), f"disagreement at +{minutes}min")

	def test_liveness_never_returns_once_lost(self):
		seen_dead = False
		for minutes in range(0, 20):
			live = is_live(self.party, self.now + timedelta(minutes=minutes))
			if seen_dead:
				self.assertFalse(live)
			seen_dead = seen_dead or not live


class ShowOfInterestWindowTests(TestCase):
	def setUp(self):
		self.host = make_user("soi_host")
		self.now = timezone.now()

	def test_start_nine_minutes_ago_is_live(self):
		soi = insert_soi(self.host, self.now - timedelta(minutes=9))
		self.assertTrue(is_live(soi, self.now))

	def test_start_eleven_minutes_ago_is_not_live(self):
		soi = insert_soi(self.host, self.now - timedelta(minutes=11))
		self.assertFalse(is_live(soi, self.now))

	@override_settings(SOI_START_GRACE_MINUTES=30)
	def test_grace_is_configurable(self):
		soi = insert_soi(self.host, self.now - timedelta(minutes=20))
		self.assertTrue(is_live(soi, self.now))

	def test_expiry_timestamp_ends_window_early(self):
		soi = insert_soi(
			self.host,
			self.now + timedelta(hours=2),
			expiry_timestamp=self.now + timedelta(minutes=30),
		)
		self.assertTrue(is_live(soi, self.now + timedelta(minutes=29)))
		self.assertFalse(is_live(soi, self.now + timedelta(minutes=31)))
		self.assertEqual(ended_at(soi), self.now + timedelta(minutes=30))

	def test_live_q_agrees_with_is_live(self):
		soi = insert_soi(self.host, self.now - timedelta(minutes=5))
		for minutes in (0, 4, 5, 6, 20):
			at = self.now + timedelta(minutes=minutes)
			in_query = Offering.objects.filter(live_q(at), pk=soi.pk).exists()
			self.assertEqual(in_query, is_live(soi, at))


class FailClosedTests(TestCase):
	def test_naive_now_is_never_live(self):
		offering = SimpleNamespace(
			is_active=True,
			kind=Offering.KIND_PARTY,
			expires_at=timezone.now() + timedelta(minutes=5),
		)
		self.assertFalse(is_live(offering, datetime.now()))

	def test_missing_expiry_is_not_live(self):
		offering = SimpleNamespace(is_active=True, kind=Offering.KIND_PARTY, expires_at=None)
		self.assertFalse(is_live(offering, timezone.now()))

	def test_unknown_kind_is_not_live(self):
		offering = SimpleNamespace(is_active=True, kind="carpool", expires_at=None)
		self.assertFalse(is_live(offering, timezone.now()))

	def test_missing_attributes_are_not_live(self):
		self.assertFalse(is_live(SimpleNamespace(), timezone.now()))


class EndedReasonTests(TestCase):
	def setUp(self):
		self.host = make_user("reason_host")
		self.now = timezone.now()

	def test_live_offering_has_no_reason(self):
		party = create_party(ctx_for(self.host, self.now), party_payload())
		self.assertIsNone(ended_reason(party, self.now))

	def test_elapsed_offering_is_expired(self):
		party = create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=5))
		self.assertEqual(ended_reason(party, self.now + timedelta(minutes=6)), "expired")

	def test_cancelled_offering_is_cancelled(self):
		party = create_party(ctx_for(self.host, self.now), party_payload())
		party.is_active = False
		party.cancelled_at = self.now
		self.assertEqual(ended_reason(party, self.now), "cancelled")


class ClockTests(TestCase):
	def test_parse_hhmm(self):
		self.assertEqual(parse_hhmm("07:05"), (7, 5))
		self.assertEqual(parse_hhmm(" 23:59 "), (23, 59))

	def test_parse_hhmm_rejects_garbage(self):
		for value in ("", "7", "24:00", "12:60", "noon", None):
			with self.assertRaises(ValueError):
				parse_hhmm(value)

	def test_past_clock_time_rolls_to_tomorrow(self):
		tz = ZoneInfo("Asia/Kolkata")
		now = datetime(2025, 3, 10, 23, 55, tzinfo=tz)
		start = next_occurrence("23:50", now, tz)
		self.assertEqual(start, datetime(2025, 3, 11, 23, 50, tzinfo=tz))

	def test_later_clock_time_stays_today(self):
		tz = ZoneInfo("Asia/Kolkata")
		now = datetime(2025, 3, 10, 8, 0, tzinfo=tz)
		start = next_occurrence("09:15", now, tz)
		self.assertEqual(start, datetime(2025, 3, 10, 9, 15, tzinfo=tz))

	def test_equal_clock_time_rolls_to_tomorrow(self):
		now = datetime(2025, 3, 10, 12, 0, tzinfo=dt_timezone.utc)
		start = next_occurrence("12:00", now, dt_timezone.utc)
		self.assertEqual(start, datetime(2025, 3, 11, 12, 0, tzinfo=dt_timezone.utc))
