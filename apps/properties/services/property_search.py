"""Filtering and lookup queries over a user's properties."""

from django.db.models import Q

from ..models import RuralProperty

AUTOCOMPLETE_LIMIT = 20

SEARCH_FIELDS = ('owner_name', 'farm_name', 'address', 'cpf', 'phone')


def filter_properties(
    queryset,
    *,
    search=None,
    status=None,
    date_from=None,
    date_to=None,
    amount_min=None,
    amount_max=None
):
    """
    Narrow a property queryset with the list filters.

    ``search`` is a case-insensitive substring match over owner, farm,
    address, CPF and phone. Range bounds are inclusive.
    """
    if search:
        condition = Q()
        for field in SEARCH_FIELDS:
            condition |= Q(**{f'{field}__icontains': search})
        queryset = queryset.filter(condition)

    if status:
        queryset = queryset.filter(payment_status=status)

    if date_from is not None:
        queryset = queryset.filter(due_date__gte=date_from)
    if date_to is not None:
        queryset = queryset.filter(due_date__lte=date_to)

    if amount_min is not None:
        queryset = queryset.filter(amount__gte=amount_min)
    if amount_max is not None:
        queryset = queryset.filter(amount__lte=amount_max)

    return queryset


def autocomplete_by_letter(*, user, letter: str, limit: int = AUTOCOMPLETE_LIMIT):
    """Properties whose owner or farm name starts with letter."""
    if not letter:
        return RuralProperty.objects.none()

    return (
        RuralProperty.objects
        .filter(user=user)
        .filter(Q(owner_name__istartswith=letter) | Q(farm_name__istartswith=letter))
        .order_by('owner_name')[:limit]
    )
