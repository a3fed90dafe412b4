from django.db import IntegrityError, transaction
from django.test import TestCase, TransactionTestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from accounts.models import User
from offerings.tests.utils import run_concurrently
from services import (
	DuplicateError,
	ForbiddenError,
	NotFoundError,
	RequestContext,
	SelfReferenceError,
	ValidationError,
)
from services.connection_graph import (
	are_connected,
	block,
	connected_user_ids,
	connections_bundle,
	remove,
	respond,
	search_usernames,
	send_request,
	send_request_by_username,
)

from .models import Connection


def make_user(username, **extra):
	return User.objects.create_user(username=username, password="pass1234", **extra)


class ConnectionRequestTests(TestCase):
	def setUp(self):
		self.alice = make_user("alice")
		self.bob = make_user("bob")
		self.alice_ctx = RequestContext.for_user(self.alice)
		self.bob_ctx = RequestContext.for_user(self.bob)

	def test_send_request_creates_pending(self):
		connection = send_request(self.alice_ctx, self.bob.pk)

		self.assertEqual(connection.status, Connection.STATUS_PENDING)
		self.assertEqual(connection.pair_key, f"{min(self.alice.pk, self.bob.pk)}:{max(self.alice.pk, self.bob.pk)}")

	def test_send_request_twice_is_duplicate(self):
		send_request(self.alice_ctx, self.bob.pk)
		with self.assertRaises(DuplicateError):
			send_request(self.alice_ctx, self.bob.pk)

	def test_reverse_direction_is_duplicate(self):
		send_request(self.alice_ctx, self.bob.pk)
		with self.assertRaises(DuplicateError):
			send_request(self.bob_ctx, self.alice.pk)

	def test_cannot_connect_with_self(self):
		with self.assertRaises(SelfReferenceError):
			send_request(self.alice_ctx, self.alice.pk)

	def test_unknown_addressee(self):
		with self.assertRaises(NotFoundError):
			send_request(self.alice_ctx, 987654)

	def test_send_by_username_is_case_insensitive(self):
		connection = send_request_by_username(self.alice_ctx, "  BOB ")
		self.assertEqual(connection.addressee, self.bob)

	def test_send_by_blank_username(self):
		with self.assertRaises(ValidationError):
			send_request_by_username(self.alice_ctx, "   ")

	def test_accept_connects_both_ways(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, connection.pk, accept=True)

		self.assertTrue(are_connected(self.alice.pk, self.bob.pk))
		self.assertTrue(are_connected(self.bob.pk, self.alice.pk))
		self.assertEqual(connected_user_ids(self.alice.pk), {self.bob.pk})

	def test_only_addressee_can_respond(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		with self.assertRaises(ForbiddenError):
			respond(self.alice_ctx, connection.pk, accept=True)

	def test_outsider_cannot_see_connection(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		carol_ctx = RequestContext.for_user(make_user("carol"))
		with self.assertRaises(NotFoundError):
			respond(carol_ctx, connection.pk, accept=True)

	def test_respond_only_once(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, connection.pk, accept=False)
		with self.assertRaises(ForbiddenError):
			respond(self.bob_ctx, connection.pk, accept=True)

	def test_request_again_after_decline(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, connection.pk, accept=False)

		again = send_request(self.alice_ctx, self.bob.pk)
		self.assertEqual(again.status, Connection.STATUS_PENDING)

	def test_remove_accepted_connection(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, connection.pk, accept=True)

		remove(self.alice_ctx, connection.pk)
		self.assertFalse(are_connected(self.alice.pk, self.bob.pk))
		self.assertFalse(Connection.objects.filter(pk=connection.pk).exists())

	def test_block_stops_requests(self):
		connection = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, connection.pk, accept=True)

		blocked = block(self.bob_ctx, self.alice.pk)
		self.assertEqual(blocked.status, Connection.STATUS_BLOCKED)
		self.assertFalse(are_connected(self.alice.pk, self.bob.pk))

		with self.assertRaises(ForbiddenError):
			send_request(self.alice_ctx, self.bob.pk)

	def test_block_without_prior_connection(self):
		blocked = block(self.alice_ctx, self.bob.pk)
		self.assertEqual(blocked.status, Connection.STATUS_BLOCKED)
		self.assertEqual(block(self.alice_ctx, self.bob.pk).pk, blocked.pk)

	def test_both_sides_blocking_share_one_row(self):
		first = block(self.alice_ctx, self.bob.pk)
		second = block(self.bob_ctx, self.alice.pk)

		self.assertEqual(first.pk, second.pk)
		self.assertEqual(Connection.objects.filter(status=Connection.STATUS_BLOCKED).count(), 1)

	def test_second_blocked_row_rejected_by_database(self):
		block(self.alice_ctx, self.bob.pk)
		with self.assertRaises(IntegrityError), transaction.atomic():
			Connection.objects.create(
				requester=self.bob, addressee=self.alice, status=Connection.STATUS_BLOCKED
			)

	def test_blocked_row_cannot_be_removed(self):
		blocked = block(self.alice_ctx, self.bob.pk)
		with self.assertRaises(ForbiddenError):
			remove(self.bob_ctx, blocked.pk)

	def test_bundle(self):
		carol = make_user("carol")
		accepted = send_request(self.alice_ctx, self.bob.pk)
		respond(self.bob_ctx, accepted.pk, accept=True)
		incoming = send_request(RequestContext.for_user(carol), self.alice.pk)

		bundle = connections_bundle(self.alice_ctx)
		self.assertEqual([c.pk for c in bundle["connections"]], [accepted.pk])
		self.assertEqual([c.pk for c in bundle["incoming_requests"]], [incoming.pk])
		self.assertEqual(bundle["outgoing_requests"], [])


class ConcurrentConnectionTests(TransactionTestCase):
	def test_crossing_requests_open_one_row(self):
		alice = make_user("alice")
		bob = make_user("bob")

		outcomes = run_concurrently([
			(lambda sender=sender, target=target: send_request(RequestContext.for_user(sender), target.pk))
			for sender, target in [(alice, bob), (bob, alice)] * 3
		])

		opened = [o for o in outcomes if isinstance(o, Connection)]
		duplicates = [o for o in outcomes if isinstance(o, DuplicateError)]
		self.assertEqual(len(opened), 1)
		self.assertEqual(len(duplicates), 5)
		self.assertEqual(Connection.objects.count(), 1)

	def test_concurrent_blocks_keep_one_blocked_row(self):
		alice = make_user("alice")
		bob = make_user("bob")

		outcomes = run_concurrently([
			(lambda blocker=blocker, target=target: block(RequestContext.for_user(blocker), target.pk))
			for blocker, target in [(alice, bob), (bob, alice)] * 2
		])

		self.assertTrue(all(isinstance(o, Connection) for o in outcomes))
		self.assertEqual(len({o.pk for o in outcomes}), 1)
		self.assertEqual(Connection.objects.filter(status=Connection.STATUS_BLOCKED).count(), 1)


class UsernameSearchTests(TestCase):
	def setUp(self):
		self.me = make_user("sam", university="IIT Roorkee")
		self.ctx = RequestContext.for_user(self.me)
		make_user("samantha", university="IIT Roorkee")
		make_user("isam", university="IIT Delhi")
		make_user("rosamund", university="IIT Roorkee")
		make_user("zed")

	def test_prefix_matches_first_and_self_excluded(self):
		names = [u.username for u in search_usernames(self.ctx, "SAM")]
		self.assertEqual(names, ["samantha", "isam", "rosamund"])

	def test_same_university_filter(self):
		names = [u.username for u in search_usernames(self.ctx, "sam", same_university=True)]
		self.assertEqual(names, ["samantha", "rosamund"])

	def test_blank_query(self):
		self.assertEqual(search_usernames(self.ctx, "  "), [])

	@override_settings(USERNAME_SEARCH_LIMIT=1)
	def test_limit(self):
		self.assertEqual(len(search_usernames(self.ctx, "sam")), 1)


class ConnectionApiTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = make_user("alice")
		self.bob = make_user("bob")
		self.client.force_authenticate(user=self.alice)

	def test_request_and_accept(self):
		response = self.client.post(reverse("connections:request"), {"username": "bob"}, format="json")
		self.assertEqual(response.status_code, 201)
		connection_id = response.data["id"]
		self.assertEqual(response.data["other_user"]["username"], "bob")

		self.client.force_authenticate(user=self.bob)
		response = self.client.post(
			reverse("connections:respond", args=[connection_id]), {"accept": True}, format="json"
		)
		self.assertEqual(response.data["status"], Connection.STATUS_ACCEPTED)

		listing = self.client.get(reverse("connections:list"))
		self.assertEqual(len(listing.data["connections"]), 1)
		self.assertEqual(listing.data["connections"][0]["other_user"]["username"], "alice")

	def test_self_request_is_bad_request(self):
		response = self.client.post(reverse("connections:request"), {"user_id": self.alice.pk}, format="json")
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data["code"], "self_reference")

	def test_duplicate_request_conflicts(self):
		self.client.post(reverse("connections:request"), {"user_id": self.bob.pk}, format="json")
		response = self.client.post(reverse("connections:request"), {"user_id": self.bob.pk}, format="json")
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data["code"], "duplicate")

	def test_request_needs_a_target(self):
		response = self.client.post(reverse("connections:request"), {}, format="json")
		self.assertEqual(response.status_code, 400)

	def test_remove(self):
		response = self.client.post(reverse("connections:request"), {"user_id": self.bob.pk}, format="json")
		response = self.client.delete(reverse("connections:remove", args=[response.data["id"]]))
		self.assertEqual(response.status_code, 204)

	def test_search(self):
		response = self.client.get(reverse("connections:search"), {"q": "bo"})
		self.assertEqual([u["username"] for u in response.data["results"]], ["bob"])
