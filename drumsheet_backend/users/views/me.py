from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.models import Profile
from users.serializers import ProfileUpdateSerializer, UserSerializer

# ---------------------------
# VIEW
# ---------------------------


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(
        responses={200: UserSerializer},
        description="Current user with points balance and preferred locale",
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
        description="Update display name / preferred locale",
    )
    def patch(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = request.user
        if "name" in data:
            user.name = data["name"]
            user.save(update_fields=["name", "updated_at"])

        if "preferred_locale" in data:
            profile = Profile.for_user(user)
            profile.preferred_locale = data["preferred_locale"].strip()
            profile.save(update_fields=["preferred_locale", "updated_at"])

        return Response(UserSerializer(user).data)
