"""Permission classes for companies and their boletos."""
from rest_framework.permissions import BasePermission


class IsCompanyOwner(BasePermission):
    """
    Object-level permission for a company or anything hanging off one
    (boletos, fees): only the operator who registered the company passes.
    """

    message = 'Você não tem permissão para acessar esta empresa.'

    def has_object_permission(self, request, view, obj):
        company = getattr(obj, 'company', obj)
        return company.user_id == request.user.id
