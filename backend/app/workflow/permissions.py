"""
Role → target sign-off rules. Pure functions, no I/O.

    korea_agent     source only
    translator      the primary translation language only
    foreign_lawyer  the localized languages, never the primary one
    family_viewer   nothing
    admin           everything
"""
from typing import AbstractSet, Optional, Union

from app.auth.models import UserRole

SOURCE_TARGET = "source"

_DEFAULT_PRIMARY_LANG = "en"
_DEFAULT_LOCALIZED_LANGS = frozenset({"si", "ta"})


def parse_role(value: Union[UserRole, str, None]) -> Optional[UserRole]:
    """UserRole for a stored or token role string, None when unrecognised."""
    if isinstance(value, UserRole):
        return value
    if not value:
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


def can_approve(
    role: Union[UserRole, str, None],
    target: str,
    *,
    primary_lang: str = _DEFAULT_PRIMARY_LANG,
    localized_langs: AbstractSet[str] = _DEFAULT_LOCALIZED_LANGS,
) -> bool:
    parsed = parse_role(role)
    if parsed is None:
        return False

    match parsed:
        case UserRole.KOREA_AGENT:
            return target == SOURCE_TARGET
        case UserRole.TRANSLATOR:
            return target == primary_lang
        case UserRole.FOREIGN_LAWYER:
            return target != primary_lang and target in localized_langs
        case UserRole.FAMILY_VIEWER:
            return False
        case UserRole.ADMIN:
            return True
    return False
