import logging

from fastapi import APIRouter, HTTPException, Request

from toastcore.models.import_map import ImportMap
from toastcore.routers.pages import limiter
from toastcore.services.errors import ParseError
from toastcore.services.import_map import parse_import_map

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/import-map",
    response_model=ImportMap,
    summary="Parse an import map and rewrite relative entries",
    description=(
        "Body is an import-map document `{\"imports\": {...}}`.  Values "
        "starting with `./` are rewritten to `/web_modules/<rest>`; all other "
        "values are returned unchanged.  Keys come back sorted."
    ),
)
@limiter.limit("30/minute")
async def import_map_endpoint(request: Request) -> ImportMap:
    body = await request.body()
    try:
        return parse_import_map(body)
    except ParseError as exc:
        logger.warning("Rejected import map: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
