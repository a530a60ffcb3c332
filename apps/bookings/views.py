"""API views for the reservation engine."""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.value_objects import DateRange

from apps.users.roles import Actor, Permission

from . import services
from .application.command_handlers import (
    ChangeReservationStatusCommand,
    CreateReservationCommand,
    QuoteReservationCommand,
    authorize,
)
from .serializers import (
    CalendarQuerySerializer,
    QuoteQuerySerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    ReservationStatusSerializer,
    StayQuerySerializer,
)

logger = logging.getLogger(__name__)


def _actor(request) -> Actor:
    return Actor.from_user(getattr(request, "user", None))


class AvailabilityView(APIView):
    """Disponibilité d'un loft pour une période."""

    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[StayQuerySerializer])
    def get(self, request):  # type: ignore
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        authorize(_actor(request), Permission.VIEW_AVAILABILITY)

        dates = DateRange(query.validated_data["check_in"], query.validated_data["check_out"])
        result = services.get_availability_checker().check(query.validated_data["property_id"], dates)
        return Response(result.to_dict())


class QuoteView(APIView):
    """Devis d'un séjour : disponibilité et détail du prix."""

    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[QuoteQuerySerializer])
    def get(self, request):  # type: ignore
        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data

        quote = services.get_quote_handler().handle(
            QuoteReservationCommand(
                property_id=data["property_id"],
                check_in=data["check_in"],
                check_out=data["check_out"],
                guests_count=data["guests"],
            ),
            _actor(request),
        )
        return Response(quote.to_dict())


class PropertyCalendarView(APIView):
    """Calendrier jour par jour d'un loft."""

    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[CalendarQuerySerializer])
    def get(self, request, property_id: int):  # type: ignore
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        authorize(_actor(request), Permission.VIEW_AVAILABILITY)

        window = DateRange(query.validated_data["start"], query.validated_data["end"])
        days = services.get_availability_checker().calendar_days(property_id, window)
        return Response({
            "property_id": property_id,
            "start": window.start_date.isoformat(),
            "end": window.end_date.isoformat(),
            "days": [day.to_dict() for day in days],
        })


class ReservationViewSet(viewsets.ViewSet):
    """Création et suivi des réservations.

    Permissions are checked by the command handlers against the actor's role.
    """

    permission_classes = [permissions.AllowAny]

    @extend_schema(request=ReservationCreateSerializer, responses={201: ReservationSerializer})
    def create(self, request):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        reservation = services.get_create_reservation_handler().handle(
            CreateReservationCommand(
                property_id=data["property_id"],
                check_in=data["check_in"],
                check_out=data["check_out"],
                guests_count=data["guests"],
                guest_name=data["guest_name"],
                guest_email=data["guest_email"],
                guest_phone=data["guest_phone"],
                special_requests=data.get("special_requests", ""),
                guest_id=data.get("guest_id"),
            ),
            _actor(request),
        )
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=ReservationSerializer)
    def retrieve(self, request, pk=None):  # type: ignore
        reservation = services.get_reservation_handler().handle(pk, _actor(request))
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=ReservationStatusSerializer, responses=ReservationSerializer)
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = ReservationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = services.get_change_status_handler().handle(
            ChangeReservationStatusCommand(
                booking_id=pk,
                status=serializer.validated_data["status"],
                reason=serializer.validated_data.get("reason", ""),
            ),
            _actor(request),
        )
        return Response(ReservationSerializer(reservation).data)
