"""
Result values returned by server actions.

Actions never raise for expected outcomes (not authenticated, invalid input,
missing target, denied permission). They return an ActionResult whose `error`
is a localized, user-facing message and whose `code` lets the HTTP layer pick
a status.
"""
import enum
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from pydantic import BaseModel, ValidationError

from hub.core import config


class ActionErrorCode(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


MESSAGES: Dict[str, Dict[str, str]] = {
    "fr": {
        "unauthenticated": "Non authentifié",
        "invalid": "Données invalides",
        "forbidden": "Vous n'avez pas la permission d'effectuer cette action",
        "forbidden_field": "Vous n'avez pas la permission de modifier ce champ : {field}",
        "forbidden_role": "Vous ne pouvez pas attribuer un rôle supérieur au vôtre",
        "forbidden_outranked": "Ce membre a un rôle supérieur au vôtre",
        "self_delete": "Impossible de supprimer votre propre compte",
        "self_deactivate": "Impossible de désactiver votre propre compte",
        "self_remove": "Impossible de vous retirer vous-même du groupement",
        "self_role": "Impossible de modifier votre propre rôle",
        "group_not_found": "Groupement introuvable",
        "user_not_found": "Utilisateur introuvable",
        "member_not_found": "Cet utilisateur n'est pas membre du groupement",
        "already_member": "Cet utilisateur est déjà membre du groupement",
        "email_taken": "Cet email est déjà utilisé",
        "unknown_role": "Rôle inconnu : {role}",
    },
    "en": {
        "unauthenticated": "Not authenticated",
        "invalid": "Invalid data",
        "forbidden": "You do not have permission to perform this action",
        "forbidden_field": "You do not have permission to modify this field: {field}",
        "forbidden_role": "You cannot assign a role above your own",
        "forbidden_outranked": "This member outranks you",
        "self_delete": "You cannot delete your own account",
        "self_deactivate": "You cannot deactivate your own account",
        "self_remove": "You cannot remove yourself from the group",
        "self_role": "You cannot change your own role",
        "group_not_found": "Group not found",
        "user_not_found": "User not found",
        "member_not_found": "This user is not a member of the group",
        "already_member": "This user is already a member of the group",
        "email_taken": "This email is already in use",
        "unknown_role": "Unknown role: {role}",
    },
}


def message(key: str, **params: Any) -> str:
    """Localized message for `key` in the configured locale (falls back to French)."""
    catalog = MESSAGES.get(config.HUB_LOCALE, MESSAGES["fr"])
    return catalog.get(key, MESSAGES["fr"][key]).format(**params)


class ActionResult(BaseModel):
    """Standard action result."""
    success: bool
    error: Optional[str] = None
    code: Optional[ActionErrorCode] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]] = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: ActionErrorCode, key: Optional[str] = None, **params: Any) -> "ActionResult":
        return cls(success=False, code=code, error=message(key or code.value, **params))

    @classmethod
    def invalid(cls, exc: ValidationError) -> "ActionResult":
        """Failure carrying the first validation issue, like a form would show it."""
        errors = exc.errors()
        first = errors[0]["msg"] if errors else message("invalid")
        return cls(success=False, code=ActionErrorCode.INVALID, error=first)


_STATUS_BY_CODE = {
    ActionErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ActionErrorCode.INVALID: status.HTTP_400_BAD_REQUEST,
    ActionErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ActionErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ActionErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
}


def raise_for_result(result: ActionResult) -> ActionResult:
    """
    Translate a failed ActionResult into an HTTPException for route handlers.

    Returns the result unchanged on success.
    """
    if result.success:
        return result
    raise HTTPException(
        status_code=_STATUS_BY_CODE.get(result.code, status.HTTP_400_BAD_REQUEST),
        detail=result.error,
    )
