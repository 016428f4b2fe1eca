# deliveries/views/couriers.py

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from deliveries.models import CourierAssignment
from deliveries.serializers import CourierAssignmentSerializer
from deliveries.services.deliveries import cancel_courier_assignment
from deliveries.services.exceptions import DeliveryError
from deliveries.views.errors import delivery_error_response
from permissions.roles import is_admin


def visible_courier_assignments(user):
    qs = CourierAssignment.objects.select_related("delivery", "courier")
    if is_admin(user):
        return qs
    return qs.filter(courier=user)


class CourierAssignmentListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CourierAssignmentSerializer

    def get_queryset(self):
        qs = visible_courier_assignments(self.request.user)
        status_param = (self.request.query_params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-created_at")


class CourierAssignmentCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: CourierAssignmentSerializer})
    def post(self, request, pk):
        assignment = get_object_or_404(visible_courier_assignments(request.user), pk=pk)
        try:
            assignment = cancel_courier_assignment(assignment=assignment, courier=request.user)
        except DeliveryError as exc:
            return delivery_error_response(exc)
        return Response(CourierAssignmentSerializer(assignment).data)
