from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from connections.models import Connection
from offerings.models import Offering
from services.offering_lifecycle import (
	cancel,
	create_party,
	create_soi,
	join,
	list_expired_offerings,
	list_live_offerings,
	list_my_offerings,
)

from .utils import ctx_for, insert_soi, make_user, party_payload, soi_payload


class LiveFeedTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.viewer = make_user("viewer")

	def test_sorted_soonest_ending_first(self):
		long_party = create_party(ctx_for(make_user("a"), self.now), party_payload(duration_minutes=60))
		short_party = create_party(ctx_for(make_user("b"), self.now), party_payload(duration_minutes=5))
		mid_party = create_party(ctx_for(make_user("c"), self.now), party_payload(duration_minutes=20))

		feed = list_live_offerings(ctx_for(self.viewer, self.now), Offering.KIND_PARTY)
		self.assertEqual([o.pk for o in feed], [short_party.pk, mid_party.pk, long_party.pk])

	@override_settings(LIVE_FEED_LIMIT=3, SOI_START_GRACE_MINUTES=10)
	def test_limit_keeps_soonest_ending_across_kinds(self):
		late_party = create_party(ctx_for(make_user("a"), self.now), party_payload(duration_minutes=60))
		soon_party = create_party(ctx_for(make_user("b"), self.now), party_payload(duration_minutes=5))
		# ends at start + grace, 40 minutes out
		scheduled = insert_soi(make_user("c"), self.now + timedelta(minutes=30))
		# far start but an early expiry, 15 minutes out
		cut_short = insert_soi(
			make_user("d"),
			self.now + timedelta(hours=2),
			expiry_timestamp=self.now + timedelta(minutes=15),
		)

		feed = list_live_offerings(ctx_for(self.viewer, self.now))

		self.assertEqual([o.pk for o in feed], [soon_party.pk, cut_short.pk, scheduled.pk])
		self.assertNotIn(late_party.pk, [o.pk for o in feed])

	def test_elapsed_and_cancelled_hidden(self):
		host_a = make_user("a")
		create_party(ctx_for(host_a, self.now), party_payload(duration_minutes=5))
		cancelled = create_party(ctx_for(make_user("b"), self.now), party_payload())
		cancel(ctx_for(cancelled.host, self.now), cancelled.pk)

		feed = list_live_offerings(ctx_for(self.viewer, self.now + timedelta(minutes=6)))
		self.assertEqual(feed, [])

	def test_kind_filter(self):
		create_party(ctx_for(make_user("a"), self.now), party_payload())
		soi = create_soi(ctx_for(make_user("b"), self.now), soi_payload())

		feed = list_live_offerings(ctx_for(self.viewer, self.now), Offering.KIND_SOI)
		self.assertEqual([o.pk for o in feed], [soi.pk])

	def test_friends_only_visible_to_connections(self):
		host = make_user("host")
		party = create_party(ctx_for(host, self.now), party_payload(is_friends_only=True))

		self.assertEqual(list_live_offerings(ctx_for(self.viewer, self.now)), [])
		self.assertEqual([o.pk for o in list_live_offerings(ctx_for(host, self.now))], [party.pk])

		Connection.objects.create(requester=self.viewer, addressee=host, status=Connection.STATUS_ACCEPTED)
		self.assertEqual([o.pk for o in list_live_offerings(ctx_for(self.viewer, self.now))], [party.pk])

	def test_is_joined_flag(self):
		party = create_party(ctx_for(make_user("host"), self.now), party_payload())
		other = create_party(ctx_for(make_user("host2"), self.now), party_payload())
		join(ctx_for(self.viewer, self.now), party.pk)

		flags = {o.pk: o.is_joined for o in list_live_offerings(ctx_for(self.viewer, self.now))}
		self.assertEqual(flags, {party.pk: True, other.pk: False})

	@override_settings(LIVE_FEED_LIMIT=2)
	def test_feed_is_limited(self):
		for name in ("a", "b", "c"):
			create_party(ctx_for(make_user(name), self.now), party_payload())
		self.assertEqual(len(list_live_offerings(ctx_for(self.viewer, self.now))), 2)


class MyOfferingsTests(TestCase):
	def test_hosted_and_joined(self):
		now = timezone.now()
		me = make_user("me")
		hosted = create_party(ctx_for(me, now), party_payload(duration_minutes=30))
		joined = create_party(ctx_for(make_user("other"), now), party_payload(duration_minutes=10))
		join(ctx_for(me, now), joined.pk)
		create_party(ctx_for(make_user("unrelated"), now), party_payload())

		mine = list_my_offerings(ctx_for(me, now))

		self.assertEqual([o.pk for o in mine], [joined.pk, hosted.pk])
		self.assertTrue(mine[0].is_joined)
		self.assertFalse(mine[1].is_joined)


class ExpiredViewTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")

	def test_cancelled_offering_listed_with_reason(self):
		party = create_party(ctx_for(self.host, self.now), party_payload())
		join(ctx_for(self.rider, self.now), party.pk)
		cancel(ctx_for(self.host, self.now + timedelta(minutes=1)), party.pk)

		expired = list_expired_offerings(ctx_for(self.rider, self.now + timedelta(minutes=2)))

		self.assertEqual([o.pk for o in expired], [party.pk])
		self.assertEqual(expired[0].ended_reason, "cancelled")
		self.assertEqual(expired[0].ended_at, self.now + timedelta(minutes=1))

	def test_elapsed_party_listed_as_expired(self):
		party = create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=5))

		expired = list_expired_offerings(ctx_for(self.host, self.now + timedelta(minutes=7)))
		self.assertEqual([o.pk for o in expired], [party.pk])
		self.assertEqual(expired[0].ended_reason, "expired")

	def test_ended_long_ago_not_listed(self):
		create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=5))
		self.assertEqual(list_expired_offerings(ctx_for(self.host, self.now + timedelta(minutes=11))), [])

	@override_settings(EXPIRED_VIEW_WINDOW_MINUTES=30)
	def test_window_is_configurable(self):
		create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=5))
		self.assertEqual(len(list_expired_offerings(ctx_for(self.host, self.now + timedelta(minutes=20)))), 1)

	def test_live_offering_not_listed(self):
		create_party(ctx_for(self.host, self.now), party_payload())
		self.assertEqual(list_expired_offerings(ctx_for(self.host, self.now)), [])

	def test_strangers_do_not_see_it(self):
		party = create_party(ctx_for(self.host, self.now), party_payload())
		cancel(ctx_for(self.host, self.now), party.pk)
		self.assertEqual(list_expired_offerings(ctx_for(self.rider, self.now)), [])

	def test_soi_past_grace_listed(self):
		soi = insert_soi(self.host, self.now - timedelta(minutes=12))
		expired = list_expired_offerings(ctx_for(self.host, self.now))
		self.assertEqual([o.pk for o in expired], [soi.pk])
		self.assertEqual(expired[0].ended_reason, "expired")

	def test_newest_end_first(self):
		first = create_party(ctx_for(self.host, self.now), party_payload(duration_minutes=1))
		join(ctx_for(self.rider, self.now), first.pk)
		second = create_party(ctx_for(make_user("host2"), self.now), party_payload(duration_minutes=3))
		join(ctx_for(self.rider, self.now), second.pk)

		expired = list_expired_offerings(ctx_for(self.rider, self.now + timedelta(minutes=4)))
		self.assertEqual([o.pk for o in expired], [second.pk, first.pk])
