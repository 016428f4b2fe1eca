# distribution/views/assignments.py

from __future__ import annotations

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from distribution.models import DistributionAssignment
from distribution.serializers import DistributionAssignmentSerializer
from distribution.services.allocation import cancel_assignment, complete_assignment
from distribution.services.exceptions import DistributionError
from distribution.views.errors import distribution_error_response
from permissions.roles import is_admin


def visible_assignments(user):
    qs = DistributionAssignment.objects.select_related("bid", "bid__asset", "retailer")
    if is_admin(user):
        return qs
    return qs.filter(Q(retailer=user) | Q(bid__creator=user))


class AssignmentListView(generics.ListAPIView):
    """
    Retailers see their batches; creators see assignments on their bids.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = DistributionAssignmentSerializer

    def get_queryset(self):
        qs = visible_assignments(self.request.user)
        status_param = (self.request.query_params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-assigned_at")


class AssignmentCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DistributionAssignmentSerializer})
    def post(self, request, pk):
        assignment = get_object_or_404(visible_assignments(request.user), pk=pk)
        try:
            assignment = cancel_assignment(assignment=assignment, user=request.user)
        except DistributionError as exc:
            return distribution_error_response(exc)
        return Response(DistributionAssignmentSerializer(assignment).data)


class AssignmentCompleteView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DistributionAssignmentSerializer})
    def post(self, request, pk):
        assignment = get_object_or_404(visible_assignments(request.user), pk=pk)
        if assignment.retailer_id != request.user.id and not is_admin(request.user):
            return Response(
                {"detail": "Only the assigned retailer or an admin can complete this assignment"},
                status=status.HTTP_403_FORBIDDEN,
            )
        try:
            assignment = complete_assignment(assignment=assignment)
        except DistributionError as exc:
            return distribution_error_response(exc)
        return Response(DistributionAssignmentSerializer(assignment).data)
