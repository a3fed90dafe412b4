import threading
from datetime import timedelta

from django.db import connection
from django.utils import timezone

from accounts.models import User
from offerings.models import Offering
from services import RequestContext, RideShareError


def make_user(username, **extra):
	return User.objects.create_user(username=username, password="pass1234", **extra)


def ctx_for(user, now=None):
	return RequestContext.for_user(user, now=now or timezone.now())


def party_payload(**overrides):
	payload = {
		"party_size": 3,
		"duration_minutes": 10,
		"meetup_point": "Main Gate",
		"drop_off": "Railway Station",
		"ride_options": ["auto", "cab"],
	}
	payload.update(overrides)
	return payload


def soi_payload(**overrides):
	payload = {
		"party_size": 2,
		"start_time": "18:30",
		"meetup_point": "Library",
		"drop_off": "Airport",
		"ride_options": ["cab"],
	}
	payload.update(overrides)
	return payload


def insert_soi(host, start_time, **fields):
	"""Write a show of interest directly, bypassing the HH:MM rollover."""
	defaults = {
		"host": host,
		"kind": Offering.KIND_SOI,
		"party_size": 2,
		"meetup_point": "Library",
		"drop_off": "Airport",
		"start_time": start_time,
		"created_at": start_time - timedelta(hours=1),
	}
	defaults.update(fields)
	return Offering.objects.create(**defaults)


def run_concurrently(calls):
	"""Start every call on its own thread at the same moment; collect outcomes."""
	barrier = threading.Barrier(len(calls))
	outcomes = [None] * len(calls)

	def worker(index, call):
		try:
			barrier.wait()
			outcomes[index] = call()
		except RideShareError as exc:
			outcomes[index] = exc
		finally:
			connection.close()

	threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()
	return outcomes
