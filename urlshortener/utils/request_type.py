from typing import Optional

from fastapi import Request


def is_browser_request(request: Request) -> bool:
    """Best-effort guess whether the caller is a browser following a link.

    API tools (Postman, fetch/XHR in CORS mode, Swagger UI) get JSON instead of
    a redirect. `?format=json` forces JSON for everyone else.
    """
    if request.query_params.get("format", "").lower() == "json":
        return False

    user_agent = request.headers.get("user-agent", "").lower()
    if "postman" in user_agent:
        return False

    if request.headers.get("sec-fetch-mode", "").lower() == "cors":
        return False

    if "swagger" in request.headers.get("referer", "").lower():
        return False

    return True


def base_url_from_request(request: Request, configured: Optional[str] = None) -> str:
    if configured:
        return configured.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"
