"""Permission classes for rural property records."""
from rest_framework.permissions import BasePermission


class IsPropertyOwner(BasePermission):
    """
    Object-level permission: only the operator who created a property may
    read or change it.

    Usage:
        class RuralPropertyViewSet(viewsets.ModelViewSet):
            permission_classes = [IsAuthenticated, IsPropertyOwner]
    """

    message = 'Você não tem permissão para acessar este imóvel.'

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.id
