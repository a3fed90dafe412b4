from datetime import timedelta

from django.test import TestCase, TransactionTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
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
from services.feedback import rating_summary, submit_rating, submit_report
from services.offering_lifecycle import create_party, join

from .models import Rating, Report


def make_user(username, **extra):
	return User.objects.create_user(username=username, password="pass1234", **extra)


class RatingTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.host = make_user("host")
		self.rider = make_user("rider")
		self.outsider = make_user("outsider")
		self.party = create_party(
			RequestContext.for_user(self.host, self.now),
			{"party_size": 3, "duration_minutes": 10, "meetup_point": "Gate", "drop_off": "Station"},
		)
		join(RequestContext.for_user(self.rider, self.now), self.party.pk)
		self.rider_ctx = RequestContext.for_user(self.rider, self.now)

	def test_member_rates_host(self):
		rating = submit_rating(self.rider_ctx, self.host.pk, self.party.pk, 4, comment="  Smooth ride ")

		self.assertEqual(rating.score, 4)
		self.assertEqual(rating.comment, "Smooth ride")

	def test_score_is_clamped(self):
		high = submit_rating(self.rider_ctx, self.host.pk, self.party.pk, 11)
		self.assertEqual(high.score, 5)

		host_ctx = RequestContext.for_user(self.host, self.now)
		low = submit_rating(host_ctx, self.rider.pk, self.party.pk, -3)
		self.assertEqual(low.score, 1)

	def test_non_numeric_score(self):
		with self.assertRaises(ValidationError):
			submit_rating(self.rider_ctx, self.host.pk, self.party.pk, "great")

	def test_rating_twice_is_duplicate(self):
		submit_rating(self.rider_ctx, self.host.pk, self.party.pk, 5)
		with self.assertRaises(DuplicateError):
			submit_rating(self.rider_ctx, self.host.pk, self.party.pk, 3)
		self.assertEqual(Rating.objects.count(), 1)

	def test_cannot_rate_self(self):
		with self.assertRaises(SelfReferenceError):
			submit_rating(self.rider_ctx, self.rider.pk, self.party.pk, 5)

	def test_outsider_cannot_rate(self):
		ctx = RequestContext.for_user(self.outsider, self.now)
		with self.assertRaises(ForbiddenError):
			submit_rating(ctx, self.host.pk, self.party.pk, 5)

	def test_unknown_offering(self):
		with self.assertRaises(NotFoundError):
			submit_rating(self.rider_ctx, self.host.pk, 424242, 5)

	def test_summary(self):
		other = make_user("other")
		join(RequestContext.for_user(other, self.now), self.party.pk)
		submit_rating(self.rider_ctx, self.host.pk, self.party.pk, 5)
		submit_rating(RequestContext.for_user(other, self.now), self.host.pk, self.party.pk, 4)

		summary = rating_summary(self.host.pk)
		self.assertEqual(summary["average_rating"], 4.5)
		self.assertEqual(summary["total_ratings"], 2)
		self.assertEqual(len(summary["ratings"]), 2)

	def test_summary_without_ratings(self):
		summary = rating_summary(self.outsider.pk)
		self.assertEqual(summary["average_rating"], 0)
		self.assertEqual(summary["total_ratings"], 0)


class ReportTests(TestCase):
	def setUp(self):
		self.now = timezone.now()
		self.reporter = make_user("reporter")
		self.reported = make_user("reported")
		self.ctx = RequestContext.for_user(self.reporter, self.now)

	def test_submit_report(self):
		report = submit_report(self.ctx, self.reported.pk, "no_show", details="Never came")

		self.assertEqual(report.status, Report.STATUS_PENDING)
		self.assertEqual(report.details, "Never came")
		self.assertIsNone(report.offering)

	def test_unknown_reason(self):
		with self.assertRaises(ValidationError) as raised:
			submit_report(self.ctx, self.reported.pk, "rude_music")
		self.assertIn("reason", raised.exception.errors)

	def test_cannot_report_self(self):
		with self.assertRaises(SelfReferenceError):
			submit_report(self.ctx, self.reporter.pk, "spam")

	def test_second_report_inside_window_is_duplicate(self):
		submit_report(self.ctx, self.reported.pk, "spam")
		later = RequestContext.for_user(self.reporter, self.now + timedelta(minutes=59))
		with self.assertRaises(DuplicateError):
			submit_report(later, self.reported.pk, "harassment")

	def test_report_allowed_after_window(self):
		submit_report(self.ctx, self.reported.pk, "spam")
		later = RequestContext.for_user(self.reporter, self.now + timedelta(minutes=61))
		submit_report(later, self.reported.pk, "harassment")
		self.assertEqual(Report.objects.count(), 2)

	@override_settings(REPORT_SPAM_WINDOW_MINUTES=5)
	def test_window_is_configurable(self):
		submit_report(self.ctx, self.reported.pk, "spam")
		later = RequestContext.for_user(self.reporter, self.now + timedelta(minutes=6))
		submit_report(later, self.reported.pk, "spam")
		self.assertEqual(Report.objects.count(), 2)

	def test_other_reporters_unaffected(self):
		submit_report(self.ctx, self.reported.pk, "spam")
		other_ctx = RequestContext.for_user(make_user("other"), self.now)
		submit_report(other_ctx, self.reported.pk, "spam")
		self.assertEqual(Report.objects.count(), 2)


class ConcurrentReportTests(TransactionTestCase):
	def test_parallel_reports_from_one_reporter_store_one(self):
		now = timezone.now()
		reporter = make_user("reporter")
		reported = make_user("reported")

		outcomes = run_concurrently([
			(lambda reason=reason: submit_report(
				RequestContext.for_user(reporter, now), reported.pk, reason
			))
			for reason in ("spam", "harassment", "no_show", "spam", "harassment", "no_show")
		])

		stored = [o for o in outcomes if isinstance(o, Report)]
		duplicates = [o for o in outcomes if isinstance(o, DuplicateError)]
		self.assertEqual(len(stored), 1)
		self.assertEqual(len(duplicates), 5)
		self.assertEqual(Report.objects.filter(reporter=reporter, reported_user=reported).count(), 1)


class FeedbackApiTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = make_user("user")
		self.target = make_user("target")
		self.client.force_authenticate(user=self.user)

	def test_report_endpoint(self):
		response = self.client.post(
			reverse("feedback:submit-report"),
			{"reported_user_id": self.target.pk, "reason": "safety"},
			format="json",
		)
		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data["reason"], "safety")

		response = self.client.post(
			reverse("feedback:submit-report"),
			{"reported_user_id": self.target.pk, "reason": "safety"},
			format="json",
		)
		self.assertEqual(response.status_code, 409)

	def test_report_reasons(self):
		response = self.client.get(reverse("feedback:report-reasons"))
		self.assertEqual(len(response.data["reasons"]), 7)

	def test_ratings_endpoint(self):
		response = self.client.get(reverse("feedback:user-ratings", args=[self.target.pk]))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data["total_ratings"], 0)
