from fastapi import APIRouter, Depends, Query

from translate_manager.api.deps import get_translation_manager
from translate_manager.schemas.storage import StoredObjectListResponse
from translate_manager.services.manager import TranslationManager

router = APIRouter()


@router.get(
    "/objects",
    response_model=StoredObjectListResponse,
    summary="List objects in the translation bucket.",
)
async def list_objects(
    prefix: str | None = Query(default=None, description="Only list keys under this prefix."),
    manager: TranslationManager = Depends(get_translation_manager),
) -> StoredObjectListResponse:
    objects = await manager.list_bucket_files(prefix=prefix)
    return StoredObjectListResponse(bucket=manager.storage.bucket, prefix=prefix, objects=objects)
