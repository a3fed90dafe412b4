from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from connections.models import Connection
from offerings.models import Membership, Offering
from services import (
	AlreadyMemberError,
	ForbiddenError,
	NotFoundError,
	NotLiveError,
	OfferingFullError,
)
from services.offering_lifecycle import (
	cancel,
	create_party,
	join,
	kick,
	leave,
	list_members,
	set_contact_shared,
)

from .utils import ctx_for, make_user, party_payload


class JoinTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.party = create_party(ctx_for(self.host, self.now), party_payload(party_size=2))

	def test_join_takes_a_slot(self):
		membership = join(ctx_for(self.rider, self.now), self.party.pk)

		self.assertEqual(membership.status, Membership.STATUS_JOINED)
		self.party.refresh_from_db()
		self.assertEqual(self.party.member_count, 1)

	def test_join_twice_is_already_member(self):
		join(ctx_for(self.rider, self.now), self.party.pk)
		with self.assertRaises(AlreadyMemberError):
			join(ctx_for(self.rider, self.now), self.party.pk)

	def test_host_cannot_join_own_offering(self):
		with self.assertRaises(AlreadyMemberError):
			join(ctx_for(self.host, self.now), self.party.pk)

	def test_join_full_offering(self):
		join(ctx_for(self.rider, self.now), self.party.pk)
		join(ctx_for(make_user("second"), self.now), self.party.pk)

		with self.assertRaises(OfferingFullError):
			join(ctx_for(make_user("third"), self.now), self.party.pk)

		self.party.refresh_from_db()
		self.assertEqual(self.party.member_count, 2)

	def test_join_after_expiry_is_not_live(self):
		with self.assertRaises(NotLiveError):
			join(ctx_for(self.rider, self.now + timedelta(minutes=11)), self.party.pk)

	def test_join_cancelled_offering_is_not_live(self):
		cancel(ctx_for(self.host, self.now), self.party.pk)
		with self.assertRaises(NotLiveError):
			join(ctx_for(self.rider, self.now), self.party.pk)

	def test_join_unknown_offering(self):
		with self.assertRaises(NotFoundError):
			join(ctx_for(self.rider, self.now), 999999)

	def test_leave_then_rejoin(self):
		ctx = ctx_for(self.rider, self.now)
		join(ctx, self.party.pk)
		self.assertTrue(leave(ctx, self.party.pk))

		self.party.refresh_from_db()
		self.assertEqual(self.party.member_count, 0)

		membership = join(ctx, self.party.pk)
		self.assertEqual(membership.status, Membership.STATUS_JOINED)
		self.assertEqual(Membership.objects.filter(offering=self.party, user=self.rider).count(), 1)

	def test_kicked_rider_cannot_rejoin(self):
		join(ctx_for(self.rider, self.now), self.party.pk)
		self.assertTrue(kick(ctx_for(self.host, self.now), self.party.pk, self.rider.pk))

		with self.assertRaises(ForbiddenError):
			join(ctx_for(self.rider, self.now), self.party.pk)


class FriendsOnlyJoinTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.friend = make_user("friend")
		self.stranger = make_user("stranger")
		Connection.objects.create(
			requester=self.host, addressee=self.friend, status=Connection.STATUS_ACCEPTED
		)
		self.party = create_party(
			ctx_for(self.host, self.now), party_payload(is_friends_only=True)
		)

	def test_connection_can_join(self):
		membership = join(ctx_for(self.friend, self.now), self.party.pk)
		self.assertEqual(membership.user, self.friend)

	def test_stranger_cannot_join(self):
		with self.assertRaises(ForbiddenError):
			join(ctx_for(self.stranger, self.now), self.party.pk)


class LeaveKickCancelTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.party = create_party(ctx_for(self.host, self.now), party_payload())
		join(ctx_for(self.rider, self.now), self.party.pk)

	def test_leave_is_idempotent(self):
		ctx = ctx_for(self.rider, self.now)
		self.assertTrue(leave(ctx, self.party.pk))
		self.assertFalse(leave(ctx, self.party.pk))

		self.party.refresh_from_db()
		self.assertEqual(self.party.member_count, 0)

	def test_host_cannot_leave(self):
		with self.assertRaises(ForbiddenError):
			leave(ctx_for(self.host, self.now), self.party.pk)

	def test_leave_after_window_is_noop(self):
		self.assertFalse(leave(ctx_for(self.rider, self.now + timedelta(minutes=30)), self.party.pk))

	def test_only_host_can_kick(self):
		other = make_user("other")
		join(ctx_for(other, self.now), self.party.pk)
		with self.assertRaises(ForbiddenError):
			kick(ctx_for(self.rider, self.now), self.party.pk, other.pk)

	def test_host_cannot_kick_self(self):
		with self.assertRaises(ForbiddenError):
			kick(ctx_for(self.host, self.now), self.party.pk, self.host.pk)

	def test_kick_frees_slot(self):
		kick(ctx_for(self.host, self.now), self.party.pk, self.rider.pk)

		self.party.refresh_from_db()
		self.assertEqual(self.party.member_count, 0)
		membership = Membership.objects.get(offering=self.party, user=self.rider)
		self.assertEqual(membership.status, Membership.STATUS_KICKED)
		self.assertEqual(membership.left_at, self.now)

	def test_cancel_by_non_host_forbidden(self):
		with self.assertRaises(ForbiddenError):
			cancel(ctx_for(self.rider, self.now), self.party.pk)

	def test_cancel_is_terminal_and_idempotent(self):
		ctx = ctx_for(self.host, self.now)
		self.assertTrue(cancel(ctx, self.party.pk))
		self.assertFalse(cancel(ctx, self.party.pk))

		self.party.refresh_from_db()
		self.assertFalse(self.party.is_active)
		self.assertFalse(self.party.holds_host_slot)
		self.assertEqual(self.party.cancelled_at, self.now)
		self.assertEqual(self.party.expires_at, self.now)


class ContactAndMembersTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host", phone_number="9000000000", show_phone=True)
		self.rider = make_user("rider", phone_number="9000000001", show_phone=True)
		self.quiet = make_user("quiet", phone_number="9000000002", show_phone=False)
		self.party = create_party(ctx_for(self.host, self.now), party_payload(party_size=4))
		join(ctx_for(self.rider, self.now), self.party.pk)
		join(ctx_for(self.quiet, self.now + timedelta(seconds=1)), self.party.pk)

	def test_members_list_host_first(self):
		members = list_members(ctx_for(self.rider, self.now), self.party.pk)

		self.assertEqual([m["user_id"] for m in members], [self.host.pk, self.rider.pk, self.quiet.pk])
		self.assertEqual(members[0]["status"], "host")
		self.assertTrue(members[0]["is_host"])
		self.assertTrue(members[1]["is_self"])
		self.assertEqual(members[0]["profile"]["phone_number"], "9000000000")

	def test_phone_hidden_until_shared(self):
		members = list_members(ctx_for(self.host, self.now), self.party.pk)
		self.assertIsNone(members[1]["profile"]["phone_number"])

		set_contact_shared(ctx_for(self.rider, self.now), self.party.pk, True)
		members = list_members(ctx_for(self.host, self.now), self.party.pk)
		self.assertEqual(members[1]["profile"]["phone_number"], "9000000001")

	def test_profile_preference_wins_over_sharing(self):
		set_contact_shared(ctx_for(self.quiet, self.now), self.party.pk, True)
		members = list_members(ctx_for(self.host, self.now), self.party.pk)
		self.assertTrue(members[2]["contact_shared"])
		self.assertIsNone(members[2]["profile"]["phone_number"])

	def test_outsider_sees_no_phone_numbers(self):
		set_contact_shared(ctx_for(self.rider, self.now), self.party.pk, True)
		outsider = make_user("outsider")

		members = list_members(ctx_for(outsider, self.now), self.party.pk)

		self.assertEqual(len(members), 3)
		self.assertEqual([m["profile"]["phone_number"] for m in members], [None, None, None])
		self.assertFalse(any(m["is_self"] for m in members))

	def test_former_member_loses_phone_access(self):
		set_contact_shared(ctx_for(self.rider, self.now), self.party.pk, True)
		leave(ctx_for(self.quiet, self.now), self.party.pk)

		members = list_members(ctx_for(self.quiet, self.now), self.party.pk)
		self.assertEqual([m["profile"]["phone_number"] for m in members], [None, None])

	def test_share_requires_membership(self):
		with self.assertRaises(NotFoundError):
			set_contact_shared(ctx_for(make_user("outsider"), self.now), self.party.pk, True)

	def test_share_on_ended_offering(self):
		with self.assertRaises(NotLiveError):
			set_contact_shared(ctx_for(self.rider, self.now + timedelta(hours=1)), self.party.pk, True)

	def test_left_members_not_listed(self):
		leave(ctx_for(self.rider, self.now), self.party.pk)
		members = list_members(ctx_for(self.host, self.now), self.party.pk)
		self.assertNotIn(self.rider.pk, [m["user_id"] for m in members])
		self.assertEqual(Offering.objects.get(pk=self.party.pk).member_count, 1)
