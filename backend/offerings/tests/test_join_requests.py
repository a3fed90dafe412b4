from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from offerings.models import JoinRequest, Membership, Offering
from services import (
	AlreadyMemberError,
	DuplicateError,
	ForbiddenError,
	NotFoundError,
	NotLiveError,
	OfferingFullError,
)
from services.offering_lifecycle import (
	cancel,
	cancel_join_request,
	create_party,
	join,
	kick,
	list_join_requests,
	request_join,
	respond_join_request,
)

from .utils import ctx_for, make_user, party_payload


class RequestJoinTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.party = create_party(ctx_for(self.host, self.now), party_payload(party_size=2))

	def test_request_is_pending(self):
		join_request = request_join(ctx_for(self.rider, self.now), self.party.pk)

		self.assertEqual(join_request.status, JoinRequest.STATUS_PENDING)
		self.assertEqual(join_request.created_at, self.now)
		self.assertFalse(Membership.objects.filter(offering=self.party, user=self.rider).exists())

	def test_second_pending_request_is_duplicate(self):
		request_join(ctx_for(self.rider, self.now), self.party.pk)
		with self.assertRaises(DuplicateError):
			request_join(ctx_for(self.rider, self.now), self.party.pk)
		self.assertEqual(JoinRequest.objects.count(), 1)

	def test_host_cannot_request(self):
		with self.assertRaises(AlreadyMemberError):
			request_join(ctx_for(self.host, self.now), self.party.pk)

	def test_member_cannot_request(self):
		join(ctx_for(self.rider, self.now), self.party.pk)
		with self.assertRaises(AlreadyMemberError):
			request_join(ctx_for(self.rider, self.now), self.party.pk)

	def test_kicked_rider_cannot_request(self):
		join(ctx_for(self.rider, self.now), self.party.pk)
		kick(ctx_for(self.host, self.now), self.party.pk, self.rider.pk)
		with self.assertRaises(ForbiddenError):
			request_join(ctx_for(self.rider, self.now), self.party.pk)

	def test_full_offering_rejects_requests(self):
		join(ctx_for(make_user("a"), self.now), self.party.pk)
		join(ctx_for(make_user("b"), self.now), self.party.pk)
		with self.assertRaises(OfferingFullError):
			request_join(ctx_for(self.rider, self.now), self.party.pk)

	def test_ended_offering_rejects_requests(self):
		with self.assertRaises(NotLiveError):
			request_join(ctx_for(self.rider, self.now + timedelta(minutes=11)), self.party.pk)

	def test_friends_only_requires_connection(self):
		friends_host = make_user("friends_host")
		party = create_party(ctx_for(friends_host, self.now), party_payload(is_friends_only=True))
		with self.assertRaises(ForbiddenError):
			request_join(ctx_for(self.rider, self.now), party.pk)


class RespondJoinRequestTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.host_ctx = ctx_for(self.host, self.now)
		self.party = create_party(self.host_ctx, party_payload(party_size=2))
		self.join_request = request_join(ctx_for(self.rider, self.now), self.party.pk)

	def test_accept_admits_rider(self):
		answered = respond_join_request(self.host_ctx, self.join_request.pk, accept=True)

		self.assertEqual(answered.status, JoinRequest.STATUS_ACCEPTED)
		self.assertEqual(answered.responded_at, self.now)
		membership = Membership.objects.get(offering=self.party, user=self.rider)
		self.assertEqual(membership.status, Membership.STATUS_JOINED)
		self.assertEqual(Offering.objects.get(pk=self.party.pk).member_count, 1)

	def test_accept_when_full_keeps_request_pending(self):
		join(ctx_for(make_user("a"), self.now), self.party.pk)
		join(ctx_for(make_user("b"), self.now), self.party.pk)

		with self.assertRaises(OfferingFullError):
			respond_join_request(self.host_ctx, self.join_request.pk, accept=True)

		self.join_request.refresh_from_db()
		self.assertEqual(self.join_request.status, JoinRequest.STATUS_PENDING)
		self.assertIsNone(self.join_request.responded_at)
		self.assertEqual(Offering.objects.get(pk=self.party.pk).member_count, 2)
		self.assertFalse(Membership.objects.filter(offering=self.party, user=self.rider).exists())

	def test_accept_after_cancel_is_not_live(self):
		cancel(self.host_ctx, self.party.pk)

		with self.assertRaises(NotLiveError):
			respond_join_request(self.host_ctx, self.join_request.pk, accept=True)

		self.join_request.refresh_from_db()
		self.assertEqual(self.join_request.status, JoinRequest.STATUS_PENDING)

	def test_decline_then_ask_again(self):
		declined = respond_join_request(self.host_ctx, self.join_request.pk, accept=False)

		self.assertEqual(declined.status, JoinRequest.STATUS_DECLINED)
		self.assertFalse(Membership.objects.filter(offering=self.party, user=self.rider).exists())

		again = request_join(ctx_for(self.rider, self.now), self.party.pk)
		self.assertNotEqual(again.pk, self.join_request.pk)

	def test_only_host_can_respond(self):
		with self.assertRaises(ForbiddenError):
			respond_join_request(ctx_for(self.rider, self.now), self.join_request.pk, accept=True)

	def test_respond_only_once(self):
		respond_join_request(self.host_ctx, self.join_request.pk, accept=False)
		with self.assertRaises(ForbiddenError):
			respond_join_request(self.host_ctx, self.join_request.pk, accept=True)

	def test_unknown_request(self):
		with self.assertRaises(NotFoundError):
			respond_join_request(self.host_ctx, 999999, accept=True)

	def test_requester_withdraws(self):
		withdrawn = cancel_join_request(ctx_for(self.rider, self.now), self.join_request.pk)
		self.assertEqual(withdrawn.status, JoinRequest.STATUS_CANCELLED)

		with self.assertRaises(ForbiddenError):
			respond_join_request(self.host_ctx, self.join_request.pk, accept=True)

	def test_only_requester_can_withdraw(self):
		with self.assertRaises(NotFoundError):
			cancel_join_request(self.host_ctx, self.join_request.pk)


class ListJoinRequestsTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.host_ctx = ctx_for(self.host, self.now)
		self.party = create_party(self.host_ctx, party_payload(party_size=4))

	def test_host_sees_pending_oldest_first(self):
		first = request_join(ctx_for(make_user("a"), self.now), self.party.pk)
		second = request_join(ctx_for(make_user("b"), self.now + timedelta(seconds=5)), self.party.pk)
		declined = request_join(ctx_for(make_user("c"), self.now), self.party.pk)
		respond_join_request(self.host_ctx, declined.pk, accept=False)

		pending = list_join_requests(self.host_ctx, self.party.pk)
		self.assertEqual([r.pk for r in pending], [first.pk, second.pk])

	def test_non_host_cannot_list(self):
		with self.assertRaises(ForbiddenError):
			list_join_requests(ctx_for(make_user("rider"), self.now), self.party.pk)

	def test_incoming_covers_live_hosted_offerings_only(self):
		waiting = request_join(ctx_for(make_user("a"), self.now), self.party.pk)
		other_host = make_user("other_host")
		other_party = create_party(ctx_for(other_host, self.now), party_payload())
		request_join(ctx_for(make_user("b"), self.now), other_party.pk)

		self.assertEqual([r.pk for r in list_join_requests(self.host_ctx)], [waiting.pk])

		later = ctx_for(self.host, self.now + timedelta(minutes=11))
		self.assertEqual(list_join_requests(later), [])


class JoinRequestApiTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.party = create_party(ctx_for(self.host), party_payload())

	def test_request_accept_flow(self):
		self.client.force_authenticate(user=self.rider)
		response = self.client.post(reverse("offerings:join-requests", args=[self.party.pk]))
		self.assertEqual(response.status_code, 201)
		request_id = response.data["id"]

		response = self.client.post(reverse("offerings:join-requests", args=[self.party.pk]))
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data["code"], "duplicate")

		response = self.client.get(reverse("offerings:join-requests", args=[self.party.pk]))
		self.assertEqual(response.status_code, 403)

		self.client.force_authenticate(user=self.host)
		response = self.client.get(reverse("offerings:incoming-join-requests"))
		self.assertEqual(response.data["count"], 1)
		self.assertEqual(response.data["requests"][0]["user"]["username"], "rider")

		response = self.client.post(
			reverse("offerings:respond-join-request", args=[request_id]), {"accept": True}, format="json"
		)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data["status"], JoinRequest.STATUS_ACCEPTED)

		members = self.client.get(reverse("offerings:members", args=[self.party.pk]))
		self.assertEqual(members.data["count"], 2)

	def test_rider_withdraws(self):
		self.client.force_authenticate(user=self.rider)
		request_id = self.client.post(reverse("offerings:join-requests", args=[self.party.pk])).data["id"]

		response = self.client.post(reverse("offerings:cancel-join-request", args=[request_id]))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data["status"], JoinRequest.STATUS_CANCELLED)
