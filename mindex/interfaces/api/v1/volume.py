"""Volume API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from ....modules.common.utils.error_handler import handle_exception
from ....modules.volume.schemas import VolumeDetail
from ....modules.volume.services import VolumeService
from ..dependencies import DbSession, get_volume_service

router = APIRouter(prefix="/volume", tags=["Volumes"])


@router.get(
    "/{volume_id}",
    summary="Get Volume Details",
    description="Retrieves a volume with its chapters and extras, chapters first, each ordered by number.",
    responses={
        200: {"description": "Volume with chapters"},
        404: {"description": "Volume not found"},
    },
)
async def get_volume(
    volume_id: int,
    db: DbSession,
    volume_service: VolumeService = Depends(get_volume_service),
) -> VolumeDetail:
    """Get a volume with its chapters."""
    try:
        result = await volume_service.get_volume(volume_id, db)
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volume not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
