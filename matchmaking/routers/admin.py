import logging

from fastapi import APIRouter, Depends, status

from matchmaking.database import get_account_service, get_application_service, get_search_service
from matchmaking.schemas.application import ApprovalUpdate, SearchFilter
from matchmaking.schemas.user import AdminCredentials
from matchmaking.services.account_service import AccountService
from matchmaking.services.application_service import ApplicationService
from matchmaking.services.auth_middleware import get_current_admin
from matchmaking.services.search_service import SearchService
from matchmaking.utils.response import create_response, handle_exception

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger(__name__)


@router.post("/create")
def create_admin(body: AdminCredentials, accounts: AccountService = Depends(get_account_service)):
    try:
        admin = accounts.create_admin(body.username, body.password)
        return create_response(
            message="Admin created successfully",
            data=admin.public(),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/login")
def login_admin(body: AdminCredentials, accounts: AccountService = Depends(get_account_service)):
    try:
        return create_response(
            message="Admin login successful",
            data=accounts.login_admin(body.username, body.password),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.get("/applications")
def list_applications(
    admin=Depends(get_current_admin),
    applications: ApplicationService = Depends(get_application_service),
):
    del admin
    try:
        payload = applications.get_all_applications()
        return create_response(
            message="Applications fetched successfully",
            data={"count": len(payload), "applications": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.get("/applications/{application_id}")
def get_application(
    application_id: str,
    admin=Depends(get_current_admin),
    applications: ApplicationService = Depends(get_application_service),
):
    del admin
    try:
        return create_response(
            message="Application fetched successfully",
            data=applications.get_single_application(application_id),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.put("/applications/{application_id}/approval")
async def approve_application(
    application_id: str,
    body: ApprovalUpdate,
    admin=Depends(get_current_admin),
    applications: ApplicationService = Depends(get_application_service),
):
    try:
        result = await applications.approve(application_id, body.approved)
        logger.info(
            "Admin %s set application %s approved=%s notified=%s",
            admin["admin_id"],
            application_id,
            body.approved,
            result["notified"],
        )
        return create_response(
            message="Application status updated successfully",
            data=result,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/applications/search")
def search_applications(
    body: SearchFilter,
    admin=Depends(get_current_admin),
    search: SearchService = Depends(get_search_service),
):
    del admin
    try:
        results = search.search(body.model_dump())
        return create_response(
            message="Search completed",
            data={"count": len(results), "results": results},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
