"""Property API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import PropertyFilterSet
from .models import Property
from .serializers import AvailabilityBlockSerializer, PropertySerializer


class PropertyViewSet(viewsets.ReadOnlyModelViewSet):
    """Public, read-only listing of lofts."""

    queryset = Property.objects.select_related("owner").all()
    serializer_class = PropertySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["nightly_price", "created_at", "max_guests"]

    @action(detail=True, methods=["get"], url_path="blocks")
    def blocks(self, request, pk=None):  # type: ignore
        property_obj: Property = self.get_object()
        qs = property_obj.availability_blocks.all()
        start = request.query_params.get("start")
        end = request.query_params.get("end")
        if start:
            qs = qs.filter(end_date__gt=start)
        if end:
            qs = qs.filter(start_date__lt=end)
        return Response(AvailabilityBlockSerializer(qs.order_by("start_date"), many=True).data)
