from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from postdesk.services.notifications import FLASH_COOKIE_NAME, FlashCookie, Notifier
from postdesk.services.sessions import SECRET_KEY, IS_PRODUCTION

router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).parent.parent / "templates")
flash = FlashCookie(SECRET_KEY)


def pending_toasts(request: Request) -> Notifier:
    """Notifier seeded with toasts flashed by the previous response."""
    return Notifier(flash.loads(request.cookies.get(FLASH_COOKIE_NAME)))


def render(request: Request, name: str, notifier: Notifier, status_code: int = 200, **context):
    """Render a template with the request's toasts and drop the flash cookie."""
    response = templates.TemplateResponse(
        request,
        name,
        {"toasts": notifier.toasts, **context},
        status_code=status_code,
    )
    if FLASH_COOKIE_NAME in request.cookies:
        response.delete_cookie(FLASH_COOKIE_NAME)
    return response


def redirect(url: str, notifier: Notifier) -> RedirectResponse:
    """303 redirect carrying the request's toasts to the next page."""
    response = RedirectResponse(url=url, status_code=303)
    if notifier.toasts:
        response.set_cookie(
            key=FLASH_COOKIE_NAME,
            value=flash.dumps(notifier.toasts),
            httponly=True,
            secure=IS_PRODUCTION,
            samesite="lax",
            max_age=60,
        )
    return response


@router.get("/")
async def index(request: Request):
    return render(request, "index.html", pending_toasts(request))


@router.get("/health")
async def health():
    return {"status": "ok"}
