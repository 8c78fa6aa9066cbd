from fastapi import APIRouter

from laburoya.core.model.catalog import JOB_CATEGORIES, ZONAS_MDP

router = APIRouter()


@router.get("")
async def get_catalog():
    return {"categories": JOB_CATEGORIES, "zonas": ZONAS_MDP}
