from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from django.conf import settings
from drf_spectacular.utils import extend_schema
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    request_password_reset as request_reset_token,
    confirm_password_reset as confirm_reset_token,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class LogoutRequestSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, help_text="Refresh token being discarded")


def _auth_payload(user, message):
    refresh = RefreshToken.for_user(user)
    return {
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new user account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(
        _auth_payload(user, 'Cadastro realizado com sucesso'),
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
        )
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(_auth_payload(user, 'Login realizado com sucesso'))


@extend_schema(
    request=LogoutRequestSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Logout. A refresh token, when sent, must be well-formed.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout; the client discards its tokens."""
    refresh_token = request.data.get('refresh')
    if refresh_token:
        try:
            RefreshToken(refresh_token)
        except TokenError:
            return Response({
                'error': 'Token inválido'
            }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Logout realizado com sucesso'
    })


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=UserSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's profile (display_name).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = UserSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(
    request=PasswordResetRequestSerializer,
    responses={200: MessageResponseSerializer},
    description="Request a password reset. Always returns success so account existence is not revealed.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def request_password_reset(request):
    """Request password reset token."""
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    payload = {
        'message': 'Se a conta existir, enviaremos as instruções de redefinição de senha'
    }
    try:
        token = request_reset_token(email=serializer.validated_data['email'])
    except UserNotFoundError:
        return Response(payload)

    if settings.DEBUG:
        payload['token'] = token
    return Response(payload)


@extend_schema(
    request=PasswordResetConfirmSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Confirm password reset with token and set new password.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def confirm_password_reset(request):
    """Confirm password reset with token."""
    serializer = PasswordResetConfirmSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        confirm_reset_token(
            token=serializer.validated_data['token'],
            new_password=serializer.validated_data['new_password'],
        )
    except InvalidTokenError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Senha redefinida com sucesso'
    })
