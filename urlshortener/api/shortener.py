from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
import logging

from urlshortener.api.deps import get_expand_service, get_shorten_service
from urlshortener.core.config import settings
from urlshortener.schemas.url import ExpandResponse, ShortenRequest, ShortenResponse
from urlshortener.services.expander import ExpandService
from urlshortener.services.shortener import ShortenService
from urlshortener.utils.encoding import is_valid_short_code
from urlshortener.utils.request_type import base_url_from_request, is_browser_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/v1/shorten", response_model=ShortenResponse, tags=["shorten"])
@router.post("/", response_model=ShortenResponse, tags=["shorten"], include_in_schema=False)
def shorten_url_endpoint(
    url_request: ShortenRequest,
    request: Request,
    service: ShortenService = Depends(get_shorten_service),
):
    original_url = str(url_request.original_url)
    result = service.shorten(original_url)

    short_url = f"{base_url_from_request(request, settings.BASE_URL)}/{result.short_code}"
    logger.info(f"API success: Shortened {original_url[:50]}... to {result.short_code}")
    return ShortenResponse(
        short_code=result.short_code,
        short_url=short_url,
        original_url=result.original_url,
    )


@router.get("/{short_code}", tags=["redirect"])
def expand_url_endpoint(
    short_code: str,
    request: Request,
    service: ExpandService = Depends(get_expand_service),
):
    """
    Redirect browsers to the original long URL; API clients get it as JSON.
    """
    short_code = short_code.strip()
    # malformed codes can never have been issued
    result = None
    if is_valid_short_code(short_code, settings.SHORT_CODE_LENGTH):
        result = service.expand(short_code)
    if result is None:
        logger.warning(f"Expand 404: Short code not found: {short_code}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short URL not found")

    if is_browser_request(request):
        return RedirectResponse(url=result.original_url, status_code=status.HTTP_302_FOUND)
    return ExpandResponse(original_url=result.original_url)
