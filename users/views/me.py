from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import capabilities_for
from users.serializers import ProfileUpdateSerializer, UserSerializer


def _profile_payload(user):
    payload = dict(UserSerializer(user).data)
    payload["capabilities"] = sorted(capabilities_for(user))
    return payload


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(
        responses={200: UserSerializer},
        description="Current user profile plus effective capabilities.",
    )
    def get(self, request):
        return Response(_profile_payload(request.user))

    @extend_schema(
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
        description="Update the current user's first and last name.",
    )
    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(_profile_payload(request.user))
