"""
SCIM Directory - Main FastAPI Application

This FastAPI application provides SCIM 2.0 endpoints for provisioning User
resources into a multi-tenant relational directory. Each identity provider
authenticates with a bearer token bound to one organisation and only ever
sees that organisation's users.

Endpoints:
- GET /health - Health check
- GET /scim/v2/Users - List the tenant's users
- POST /scim/v2/Users - Create user
- GET /scim/v2/Users/{user_id} - Get one user

The /scim/v2/users spelling is accepted as an alias for every SCIM route.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from . import __version__
from .config import SCIMDirectorySettings, get_settings
from .errors import SCIMDirectoryError, ValidationFailure
from .handlers import get_store, resolve_organisation_id
from .models import SCIMUserCreateRequest
from .services import DirectoryStore, UserBundle, UserDirectoryService
from .services.resource_mapper import to_list_response, to_scim_user

logger = logging.getLogger(__name__)

SCIM_CONTENT_TYPE = "application/scim+json"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def scim_response(content: dict, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, media_type=SCIM_CONTENT_TYPE)


def get_directory(request: Request) -> UserDirectoryService:
    return request.app.state.directory


def get_base_url(request: Request) -> str:
    return request.app.state.settings.base_url


async def read_create_request(request: Request) -> SCIMUserCreateRequest:
    """
    Parse the POST /Users body.

    Malformed JSON and bodies that do not fit the creation payload both end
    the request with a 400 before anything is written.
    """
    body = await request.body()
    try:
        return SCIMUserCreateRequest.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Failed to decode user creation request: {e.error_count()} error(s)")
        raise ValidationFailure("malformed user creation request") from e


def render_user(bundle: UserBundle, base_url: str) -> dict:
    return to_scim_user(bundle.user, bundle.emails, bundle.phone_numbers, base_url).to_wire()


# Every SCIM route sits behind the tenant gate
router = APIRouter(prefix="/scim/v2", dependencies=[Depends(resolve_organisation_id)])


@router.get("/Users")
@router.get("/Users/", include_in_schema=False)
@router.get("/users", include_in_schema=False)
@router.get("/users/", include_in_schema=False)
def list_users(
    organisation_id: Annotated[str, Depends(resolve_organisation_id)],
    directory: Annotated[UserDirectoryService, Depends(get_directory)],
    base_url: Annotated[str, Depends(get_base_url)],
):
    """
    List every user of the caller's organisation.

    Returns:
        SCIMListResponse: Single page holding all users (possibly none)
    """
    bundles = directory.list_users(organisation_id)
    users = [to_scim_user(b.user, b.emails, b.phone_numbers, base_url) for b in bundles]
    response = to_list_response(users)

    logger.debug(f"Returned {response.totalResults} users for organisation {organisation_id}")
    return scim_response(response.to_wire())


@router.post("/Users", status_code=status.HTTP_201_CREATED)
@router.post("/users", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_user(
    organisation_id: Annotated[str, Depends(resolve_organisation_id)],
    user: Annotated[SCIMUserCreateRequest, Depends(read_create_request)],
    directory: Annotated[UserDirectoryService, Depends(get_directory)],
    base_url: Annotated[str, Depends(get_base_url)],
):
    """
    Create a user under the caller's organisation.

    Emails and phone numbers that fail to persist are dropped from the
    response rather than failing the request.

    Returns:
        SCIMUser: The created user, as stored
    """
    bundle = directory.create_user(organisation_id, user)
    if not bundle.complete:
        logger.warning(
            f"User {bundle.user.id} created with {len(bundle.suppressed_errors)} suppressed child error(s)"
        )
    return scim_response(render_user(bundle, base_url), status.HTTP_201_CREATED)


@router.get("/Users/{user_id}")
@router.get("/users/{user_id}", include_in_schema=False)
def get_user(
    user_id: str,
    organisation_id: Annotated[str, Depends(resolve_organisation_id)],
    directory: Annotated[UserDirectoryService, Depends(get_directory)],
    base_url: Annotated[str, Depends(get_base_url)],
):
    """
    Get one user of the caller's organisation.

    A user id that belongs to another organisation is answered with 404,
    exactly like an unknown one.
    """
    bundle = directory.get_user(organisation_id, user_id)
    return scim_response(render_user(bundle, base_url))


def create_app(
    settings: Optional[SCIMDirectorySettings] = None,
    store: Optional[DirectoryStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (default: loaded from the environment)
        store: Store to use (default: built from settings.database_url, with
            missing tables created)

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if store is None:
        store = DirectoryStore.from_url(settings.database_url)
        store.create_schema()

    app = FastAPI(
        title="SCIM Directory",
        description="Multi-tenant SCIM 2.0 User provisioning backed by a relational store",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.store = store
    app.state.directory = UserDirectoryService(store)

    app.include_router(router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.debug(f"Request {request.method} {request.url.path}")
        return await call_next(request)

    @app.get("/health")
    def health_check(store: Annotated[DirectoryStore, Depends(get_store)]):
        """
        Health check endpoint.

        Returns:
            dict: Health status and store availability
        """
        services_status = {"store": store.ping()}
        all_services_ready = all(services_status.values())

        health_response = {
            "status": "healthy" if all_services_ready else "degraded",
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "services": services_status,
            "version": __version__
        }

        if not all_services_ready:
            logger.warning(f"Health check failed - services status: {services_status}")

        return JSONResponse(
            content=health_response,
            status_code=200 if all_services_ready else 503
        )

    @app.exception_handler(SCIMDirectoryError)
    async def scim_error_handler(request: Request, exc: SCIMDirectoryError):
        """Answer directory errors with their bare status code."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        else:
            logger.debug(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.detail}")
        return Response(status_code=exc.status_code, media_type=SCIM_CONTENT_TYPE)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Answer unhandled exceptions with a bare 500."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc!r}")
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, media_type=SCIM_CONTENT_TYPE)

    logger.info("SCIM Directory application initialized")
    return app


def run() -> None:
    """Run the service with uvicorn using the environment's settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "scim_directory.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
