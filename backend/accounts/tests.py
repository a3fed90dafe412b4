from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from .models import User
from .serializers import UserBasicSerializer


class AuthFlowTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def test_register_login_me(self):
		response = self.client.post(reverse("accounts:register"), {
			"username": "john_doe",
			"email": "john@example.com",
			"password": "password123",
			"university": "IIT Roorkee",
		}, format="json")
		self.assertEqual(response.status_code, 201)
		self.assertIn("access", response.data["tokens"])

		response = self.client.post(reverse("accounts:login"), {
			"username": "john_doe",
			"password": "password123",
		}, format="json")
		self.assertEqual(response.status_code, 200)
		access = response.data["tokens"]["access"]

		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
		response = self.client.get(reverse("accounts:me"))
		self.assertEqual(response.data["username"], "john_doe")
		self.assertEqual(response.data["university"], "IIT Roorkee")

	def test_bad_login(self):
		User.objects.create_user(username="jane", password="password123")
		response = self.client.post(reverse("accounts:login"), {
			"username": "jane",
			"password": "wrong",
		}, format="json")
		self.assertEqual(response.status_code, 400)

	def test_refresh_requires_token(self):
		response = self.client.post(reverse("accounts:refresh"), {}, format="json")
		self.assertEqual(response.status_code, 400)


class UserBasicSerializerTests(TestCase):
	def test_university_hidden_unless_opted_in(self):
		user = User.objects.create_user(username="quiet", password="x", university="IIT Delhi")
		self.assertIsNone(UserBasicSerializer(user).data["university"])

		user.show_university = True
		self.assertEqual(UserBasicSerializer(user).data["university"], "IIT Delhi")
