import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError

from .serializers import UserSerializer

logger = logging.getLogger(__name__)


class LoginView(TokenObtainPairView):
    permission_classes = [AllowAny]


class RefreshView(TokenRefreshView):
    permission_classes = [AllowAny]


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the supplied refresh token."""
    refresh_token = request.data.get("refresh")
    if not refresh_token:
        return Response(
            {"success": False, "message": "Refresh token is required."},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        RefreshToken(refresh_token).blacklist()
    except TokenError as e:
        # Already blacklisted or expired; the client drops its tokens either way
        logger.info(f"Logout with unusable refresh token for user {request.user.id}: {e}")

    return Response({"success": True, "message": "Logged out successfully."})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({"success": True, "data": UserSerializer(request.user).data})
