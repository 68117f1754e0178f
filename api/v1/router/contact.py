from typing import Optional
from fastapi import APIRouter, Depends, Request
from controller.contact import ContactOp
from schema.contact import ContactOut
from service.email import Mailer, MailComposer, get_composer, get_mailer
from service.turnstile import TurnstileVerifier, get_verifier
from config.setting import settings

contact_router = APIRouter(tags=["contact"])


def client_ip(request: Request) -> Optional[str]:
    if settings.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for", "").split(",")[0]
        if forwarded.strip():
            return forwarded.strip()
    return request.client.host if request.client else None


@contact_router.post(
    "/contact",
    response_model=ContactOut,
    response_model_exclude_none=True,
)
async def submit_contact_form(
    request: Request,
    verifier: TurnstileVerifier = Depends(get_verifier),
    composer: MailComposer = Depends(get_composer),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Submit the contact form
    - Verifies the Turnstile token against Cloudflare
    - Relays the message to the contact inbox
    - Returns a success flag and a message to display
    """
    return await ContactOp.submit_contact_form(
        await request.body(),
        client_ip(request),
        verifier,
        composer,
        mailer,
    )
