from fastapi import APIRouter, Path

from goalquest.models.level import DEFAULT_CURVE

router = APIRouter(prefix="/v1/levels", tags=["levels"])


@router.get("")
def get_level_curve() -> dict:
    """XP at which each level begins, from level 1."""
    return {
        "data": {
            "maxLevel": DEFAULT_CURVE.max_level,
            "thresholds": [0, *DEFAULT_CURVE.thresholds],
        }
    }


@router.get("/{total_xp}")
def get_level_info(total_xp: int = Path(..., ge=0)) -> dict:
    return {"data": DEFAULT_CURVE.info(total_xp).to_dict()}
