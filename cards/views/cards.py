# cards/views/cards.py

"""
CARD MANAGEMENT API

- GET  /api/cards/                 admin: all cards, retailer: own cards
- POST /api/cards/issue/           admin issues cards for a pending assignment
- POST /api/cards/activate/        retailer activates (sells) issued cards
- POST /api/cards/<id>/void/       admin voids an unredeemed card
"""

from __future__ import annotations

import uuid

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cards.models import CommandCard
from cards.serializers import (
    ActivateCardsInputSerializer,
    ActivationResultSerializer,
    CommandCardSerializer,
    IssueCardsInputSerializer,
)
from cards.services.exceptions import (
    CardPermissionError,
    CardStateError,
    InsufficientPoolError,
    IssuanceError,
)
from cards.services.issuance import activate_cards, issue_cards, void_card
from distribution.models import DistributionAssignment
from permissions.roles import (
    CAP_CARDS_ACTIVATE,
    CAP_CARDS_ISSUE,
    HasAnyCapability,
    HasCapability,
    is_admin,
)


class CardListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_CARDS_ISSUE, CAP_CARDS_ACTIVATE}
    serializer_class = CommandCardSerializer

    def get_queryset(self):
        qs = CommandCard.objects.select_related("asset", "display_id", "encryption_key")
        if not is_admin(self.request.user):
            qs = qs.filter(retailer=self.request.user)

        params = self.request.query_params
        status_param = (params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)

        assignment = (params.get("assignment") or "").strip()
        if assignment:
            try:
                assignment_id = uuid.UUID(assignment)
            except ValueError as exc:
                raise serializers.ValidationError({"assignment": "must be a UUID"}) from exc
            qs = qs.filter(assignment_id=assignment_id)

        return qs.order_by("-created_at", "serial_code")


class IssueCardsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CARDS_ISSUE

    @extend_schema(request=IssueCardsInputSerializer, responses={201: CommandCardSerializer(many=True)})
    def post(self, request):
        s = IssueCardsInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        assignment = get_object_or_404(DistributionAssignment, pk=s.validated_data["assignment"])
        try:
            cards = issue_cards(assignment=assignment, issuer=request.user)
        except CardPermissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        except InsufficientPoolError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except IssuanceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        qs = CommandCard.objects.select_related("asset", "display_id", "encryption_key").filter(
            pk__in=[c.pk for c in cards]
        )
        return Response(
            CommandCardSerializer(qs.order_by("serial_code"), many=True).data,
            status=status.HTTP_201_CREATED,
        )


class ActivateCardsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CARDS_ACTIVATE

    @extend_schema(request=ActivateCardsInputSerializer, responses={200: ActivationResultSerializer})
    def post(self, request):
        s = ActivateCardsInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = activate_cards(retailer=request.user, card_ids=s.validated_data["card_ids"])
        return Response({"activated": result.activated, "rejected": result.rejected})


class VoidCardView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CARDS_ISSUE

    @extend_schema(request=None, responses={200: CommandCardSerializer})
    def post(self, request, pk):
        card = get_object_or_404(CommandCard, pk=pk)
        try:
            card = void_card(card=card, user=request.user)
        except CardPermissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        except CardStateError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(CommandCardSerializer(card).data)
