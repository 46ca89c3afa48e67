from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from guest.models import Guest
from reservation.models import Reservation
from room.models import RoomType

GUESTS_URL = reverse("guest:guests-list")
LOGIN_URL = reverse("token_obtain_pair")


def guest_detail_url(guest_id):
    return reverse("guest:guests-detail", args=[guest_id])


def create_user(**params):
    defaults = {"username": "frontdesk", "password": "testpass123"}
    defaults.update(params)
    return get_user_model().objects.create_user(**defaults)


def create_guest(**params):
    defaults = {
        "first_name": "John",
        "last_name": "Smith",
        "email": "john@test.com",
        "phone": "555-0101",
    }
    defaults.update(params)
    return Guest.objects.create(**defaults)


class TokenApiTests(APITestCase):
    """Tests for operator login"""

    def test_login_returns_token_pair(self):
        create_user()

        res = self.client.post(
            LOGIN_URL, {"username": "frontdesk", "password": "testpass123"}
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)

    def test_login_with_wrong_password(self):
        create_user()

        res = self.client.post(
            LOGIN_URL, {"username": "frontdesk", "password": "wrong"}
        )

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_guests_require_authentication(self):
        res = self.client.get(GUESTS_URL)

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bearer_token_grants_access(self):
        create_user()
        token = self.client.post(
            LOGIN_URL, {"username": "frontdesk", "password": "testpass123"}
        ).data["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        res = self.client.get(GUESTS_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)


class GuestApiTests(APITestCase):
    """Tests for guest records"""

    def setUp(self):
        self.client.force_authenticate(create_user())

    def test_create_guest_with_address(self):
        payload = {
            "first_name": "Ana",
            "last_name": "Lopez",
            "email": "ana@test.com",
            "phone": "555-0199",
            "address": {
                "street": "1 Main St",
                "city": "Austin",
                "state": "TX",
                "zip_code": "73301",
            },
            "number_of_kids": 2,
        }

        res = self.client.post(GUESTS_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        guest = Guest.objects.get(email="ana@test.com")
        self.assertEqual(guest.city, "Austin")
        self.assertEqual(guest.zip_code, "73301")
        self.assertEqual(res.data["address"]["street"], "1 Main St")
        self.assertEqual(res.data["open_reservations"], [])

    def test_create_guest_without_address(self):
        payload = {
            "first_name": "Ana",
            "last_name": "Lopez",
            "email": "ana@test.com",
            "phone": "555-0199",
        }

        res = self.client.post(GUESTS_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["address"]["city"], "")

    def test_email_must_be_unique(self):
        create_guest(email="dup@test.com")
        payload = {
            "first_name": "Other",
            "last_name": "Person",
            "email": "dup@test.com",
            "phone": "555-0000",
        }

        res = self.client.post(GUESTS_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", res.data)

    def test_search_by_name(self):
        create_guest()
        create_guest(first_name="Maria", last_name="Garcia", email="maria@test.com")

        res = self.client.get(GUESTS_URL, {"search": "garc"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([g["email"] for g in res.data], ["maria@test.com"])

    def test_update_comments(self):
        guest = create_guest()

        res = self.client.patch(
            guest_detail_url(guest.id), {"comments": "Prefers high floor"}
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        guest.refresh_from_db()
        self.assertEqual(guest.comments, "Prefers high floor")


class GuestReservationsTests(APITestCase):
    def setUp(self):
        self.client.force_authenticate(create_user())
        self.guest = create_guest()
        self.room_type = RoomType.objects.create(
            name="Standard", base_price=Decimal("100.00")
        )
        today = timezone.localdate()
        self.open_reservation = Reservation.objects.create(
            guest=self.guest,
            room_type=self.room_type,
            check_in_date=today + timedelta(days=3),
            check_out_date=today + timedelta(days=5),
            total_amount=Decimal("200.00"),
        )
        Reservation.objects.create(
            guest=self.guest,
            room_type=self.room_type,
            check_in_date=today + timedelta(days=10),
            check_out_date=today + timedelta(days=11),
            total_amount=Decimal("100.00"),
            status=Reservation.Status.CANCELLED,
        )

    def test_detail_lists_open_reservations(self):
        res = self.client.get(guest_detail_url(self.guest.id))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["open_reservations"], [self.open_reservation.id])

    def test_deleting_guest_removes_reservations(self):
        res = self.client.delete(guest_detail_url(self.guest.id))

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Reservation.objects.filter(guest_id=self.guest.id).exists())
