from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import RegisterSerializer, LoginSerializer, UserSerializer


def _token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class RegisterView(APIView):
    """
    Register a new rider

    POST Body:
    {
        "username": "john_doe",
        "email": "john@example.com",
        "password": "password123",
        "phone_number": "+1234567890",
        "university": "IIT Roorkee"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return Response({
                'message': 'User registered successfully',
                'user': UserSerializer(user).data,
                'tokens': _token_pair(user),
            }, status=status.HTTP_201_CREATED)

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class LoginView(APIView):
    """
    Login with username and password to get JWT tokens
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # Get the user object from the validated data
        user = serializer.validated_data

        return Response({
            "message": "Login successful",
            "user": UserSerializer(user).data,
            "tokens": _token_pair(user),
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    Refresh JWT access token

    POST Body:
    {
        "refresh": "your_refresh_token"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        refresh_token = request.data.get('refresh')

        if not refresh_token:
            return Response(
                {'error': 'Refresh token is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            refresh = RefreshToken(refresh_token)
        except TokenError:
            return Response(
                {'error': 'Invalid refresh token'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        return Response({'access': str(refresh.access_token)})


class MeView(APIView):
    """GET: the authenticated user's profile as the ride engine sees it."""

    def get(self, request):
        return Response(UserSerializer(request.user).data)
