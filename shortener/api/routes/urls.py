"""
Link routes: create, read, update, delete and the public redirect.
"""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status
from fastapi.responses import RedirectResponse

from shortener.api.deps import ClaimsDep, URLServiceDep
from shortener.core.logging import get_logger
from shortener.schemas.url import LINK_ID_PATTERN, URLCreate, URLResponse, URLUpdate

logger = get_logger(__name__)

router = APIRouter(tags=["urls"])

# Served at the application root, outside the versioned prefix
redirect_router = APIRouter(tags=["redirect"])

LinkID = Annotated[str, Path(min_length=1, max_length=20, pattern=LINK_ID_PATTERN)]

# Any root path may be a short code; unknown ones resolve to 404
RedirectID = Annotated[str, Path(min_length=1)]


@router.post("/url/create", response_model=URLResponse, status_code=status.HTTP_201_CREATED)
async def create_url(url_in: URLCreate, service: URLServiceDep) -> URLResponse:
    """
    Create an anonymous short link.

    Anonymous links can never be updated or deleted.
    """
    url = await service.store(url_in.model_copy(update={"user_id": ""}))
    logger.info(f"Anonymous link created: {url.id}")
    return URLResponse.model_validate(url)


@router.post("/user/url/create", response_model=URLResponse, status_code=status.HTTP_201_CREATED)
async def create_user_url(
    url_in: URLCreate,
    service: URLServiceDep,
    claims: ClaimsDep,
) -> URLResponse:
    """
    Create a short link owned by the authenticated user.

    Args:
        url_in: Link data
        service: Link service
        claims: Verified token claims; the subject becomes the owner

    Returns:
        Created link
    """
    url = await service.store(url_in.model_copy(update={"user_id": claims.subject}))
    logger.info(f"Link created: {url.id} (owner: {claims.subject})")
    return URLResponse.model_validate(url)


@router.get("/url/{url_id}", response_model=URLResponse)
async def get_url(url_id: LinkID, service: URLServiceDep) -> URLResponse:
    return URLResponse.model_validate(await service.get_by_id(url_id))


@router.put("/url", status_code=status.HTTP_204_NO_CONTENT)
async def update_url(url_in: URLUpdate, service: URLServiceDep, claims: ClaimsDep) -> Response:
    """Change the expiration date of a link owned by the caller (or any link, for ADMIN)."""
    await service.update(url_in, claims)
    logger.info(f"Link updated: {url_in.id} (by: {claims.subject})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/url/{url_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_url(url_id: LinkID, service: URLServiceDep, claims: ClaimsDep) -> Response:
    """Delete a link owned by the caller (or any link, for ADMIN)."""
    await service.delete(url_id, claims)
    logger.info(f"Link deleted: {url_id} (by: {claims.subject})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@redirect_router.get("/{url_id}", response_class=RedirectResponse)
async def redirect(url_id: RedirectID, service: URLServiceDep) -> RedirectResponse:
    """Permanent redirect to the link's destination."""
    url = await service.get_by_id(url_id)
    return RedirectResponse(url.link, status_code=status.HTTP_301_MOVED_PERMANENTLY)
