from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from matchmaking.database import get_application_service, get_search_service
from matchmaking.schemas.application import ApplicationAmend, ApplicationCreate, SearchFilter
from matchmaking.services.application_service import ApplicationService
from matchmaking.services.auth_middleware import get_current_user_id
from matchmaking.services.photo_store import ALLOWED_CONTENT_TYPES
from matchmaking.services.search_service import SearchService
from matchmaking.utils.response import create_response, handle_exception

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("")
def create_application(
    body: ApplicationCreate,
    user_id: str = Depends(get_current_user_id),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        payload = applications.create_application(
            user_id,
            body.attributes(),
            photo=body.photo_bytes(),
            photo_content_type=body.photo_content_type,
            request_upload_url=body.request_upload_url,
        )
        return create_response(
            message="Application submitted successfully",
            data=payload,
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.get("/me")
def get_my_application(
    user_id: str = Depends(get_current_user_id),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        return create_response(
            message="Application fetched successfully",
            data=applications.get_application_for_user(user_id),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.put("/me")
def amend_application(
    body: ApplicationAmend,
    user_id: str = Depends(get_current_user_id),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        payload = applications.amend_application(
            user_id,
            body.attributes(),
            photo=body.photo_bytes(),
            photo_content_type=body.photo_content_type,
        )
        return create_response(
            message="Application amended successfully",
            data=payload,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/me/photo")
async def upload_application_photo(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported image type")

        contents = await file.read()
        if not contents:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file upload")

        payload = await run_in_threadpool(applications.replace_photo_for_user, user_id, contents, file.content_type)
        return create_response(
            message="Photo uploaded" if payload["photo_uploaded"] else "Photo upload failed",
            data=payload,
            status_code=status.HTTP_200_OK if payload["photo_uploaded"] else status.HTTP_502_BAD_GATEWAY,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.get("/me/photo-upload-url")
def photo_upload_url(
    content_type: str | None = None,
    user_id: str = Depends(get_current_user_id),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        if content_type and content_type not in ALLOWED_CONTENT_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported image type")
        return create_response(
            message="Upload URL created",
            data=applications.presign_photo_upload(user_id, content_type),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/search")
def search_applications(
    body: SearchFilter,
    user_id: str = Depends(get_current_user_id),
    search: SearchService = Depends(get_search_service),
):
    del user_id
    try:
        results = search.search(body.model_dump())
        return create_response(
            message="Search completed",
            data={"count": len(results), "results": results},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
