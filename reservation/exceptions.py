from datetime import date


class InvalidTransition(Exception):
    """Raised when a reservation cannot move from its status to the target."""

    def __init__(self, current, target, message=None) -> None:
        if message is None:
            message = f"Cannot change reservation status from {current} to {target}."
        super().__init__(message)
        self.current = current
        self.target = target


class CapacityConflict(Exception):
    """Thrown when a stay does not fit the room type's inventory"""

    def __init__(
            self,
            room_type_name: str,
            overbooked_nights: list[date],
            requested_nights: int,
            next_available_date: date | None = None,
    ) -> None:
        super().__init__(
            f"No {room_type_name} room is available for every night of this stay."
        )
        self.room_type_name = room_type_name
        self.overbooked_nights = overbooked_nights
        self.requested_nights = requested_nights
        self.next_available_date = next_available_date

    def as_dict(self) -> dict:
        return {
            "detail": str(self),
            "overbooked_nights": [night.isoformat() for night in self.overbooked_nights],
            "requested_nights": self.requested_nights,
            "next_available_date": (
                self.next_available_date.isoformat()
                if self.next_available_date
                else None
            ),
        }
