"""Duplicate property detection using CPF and fuzzy name matching."""

from typing import Optional
import re

from fuzzywuzzy import fuzz

from apps.core.validators import only_digits
from ..models import RuralProperty


# Minimum fuzz.ratio on both owner and farm names
NAME_SIMILARITY_THRESHOLD = 90


def normalize_text(text: str) -> str:
    """Lowercase, collapse whitespace and drop punctuation."""
    text = (text or '').lower().strip()
    text = re.sub(r'\s+', ' ', text)
    text = re.sub(r'[^\w\s-]', '', text)
    return text


def find_duplicate(
    *,
    user,
    cpf: Optional[str] = None,
    owner_name: Optional[str] = None,
    farm_name: Optional[str] = None,
    exclude_id=None,
    threshold: int = NAME_SIMILARITY_THRESHOLD
) -> Optional[RuralProperty]:
    """
    Find an existing property of user matching the given identity.

    A CPF decides alone when present. Otherwise both owner and farm name
    must match, either by case-insensitive containment or by fuzzy ratio.

    Returns:
        The first matching property, or None
    """
    queryset = RuralProperty.objects.filter(user=user)
    if exclude_id is not None:
        queryset = queryset.exclude(id=exclude_id)

    cpf_digits = only_digits(cpf)
    if cpf_digits:
        return queryset.filter(cpf=cpf_digits).first()

    owner_name = (owner_name or '').strip()
    farm_name = (farm_name or '').strip()
    if not owner_name or not farm_name:
        return None

    contained = queryset.filter(
        owner_name__icontains=owner_name,
        farm_name__icontains=farm_name,
    ).first()
    if contained is not None:
        return contained

    owner_norm = normalize_text(owner_name)
    farm_norm = normalize_text(farm_name)
    for candidate in queryset.exclude(farm_name=''):
        if (
            fuzz.ratio(owner_norm, normalize_text(candidate.owner_name)) >= threshold
            and fuzz.ratio(farm_norm, normalize_text(candidate.farm_name)) >= threshold
        ):
            return candidate

    return None
