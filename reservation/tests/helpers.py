from decimal import Decimal

from guest.models import Guest
from reservation.models import Reservation
from room.models import Room, RoomType


def create_guest(**params):
    defaults = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@test.com",
        "phone": "555-0100",
    }
    defaults.update(params)
    return Guest.objects.create(**defaults)


def create_room_type(**params):
    defaults = {"name": "Standard", "base_price": Decimal("100.00")}
    defaults.update(params)
    return RoomType.objects.create(**defaults)


def create_room(room_type, **params):
    defaults = {"number": "101", "room_type": room_type}
    defaults.update(params)
    return Room.objects.create(**defaults)


def create_reservation(guest, room_type, check_in, check_out, **params):
    defaults = {
        "guest": guest,
        "room_type": room_type,
        "check_in_date": check_in,
        "check_out_date": check_out,
        "total_amount": room_type.base_price * (check_out - check_in).days,
    }
    defaults.update(params)
    return Reservation.objects.create(**defaults)
