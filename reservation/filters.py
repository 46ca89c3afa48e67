import django_filters
from django.db.models import Q

from reservation.models import Reservation

SEARCH_FIELDS = (
    "id",
    "guest__first_name",
    "guest__last_name",
    "guest__email",
    "room_type__name",
    "special_requests",
)


class ReservationFilter(django_filters.FilterSet):
    from_date = django_filters.DateFilter(
        field_name="check_in_date", lookup_expr="gte"
    )
    to_date = django_filters.DateFilter(
        field_name="check_out_date", lookup_expr="lte"
    )
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Reservation
        fields = ["guest", "room_type", "specific_room", "status"]

    def filter_search(self, queryset, name, value):
        """Every word must appear in the id, guest name or email, room type or requests."""
        for term in value.split():
            query = Q()
            for field in SEARCH_FIELDS:
                query |= Q(**{f"{field}__icontains": term})
            queryset = queryset.filter(query)
        return queryset
