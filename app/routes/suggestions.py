"""Suggestion lists for the career-goal multi-selects"""

from fastapi import APIRouter, Depends, HTTPException

from app.middleware.auth import get_current_user
from app.models.career_goal import MAX_TARGET_ITEMS
from app.models.profile import Profile
from app.services.selection import SUGGESTIONS, SuggestiveList

router = APIRouter()


@router.get("/{field}")
async def get_suggestions(
    field: str,
    q: str = "",
    selected: str = "",
    user: Profile = Depends(get_current_user),
):
    suggestions = SUGGESTIONS.get(field)
    if suggestions is None:
        raise HTTPException(status_code=404, detail=f"No suggestions for {field}")

    items = SuggestiveList.from_text(selected, suggestions, max_items=MAX_TARGET_ITEMS)
    return {
        "field": field,
        "selected": items.items,
        "suggestions": [] if items.is_full else items.matching_suggestions(q),
        "isCustom": bool(q.strip()) and items.is_custom(q.strip()),
        "maxItems": MAX_TARGET_ITEMS,
    }
