from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, viewsets
from rest_framework.permissions import IsAuthenticated

from guest.models import Guest
from guest.serializers import GuestSerializer


@extend_schema_view(
    list=extend_schema(
        summary="List guests",
        description="Guest records, searchable by name, email and phone.",
    ),
    destroy=extend_schema(
        summary="Delete guest",
        description="Deletes the guest together with all of their reservations.",
    ),
)
class GuestViewSet(viewsets.ModelViewSet):
    queryset = Guest.objects.all()
    serializer_class = GuestSerializer
    permission_classes = (IsAuthenticated,)
    filter_backends = (filters.SearchFilter,)
    search_fields = ("first_name", "last_name", "email", "phone")
