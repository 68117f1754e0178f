import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, responses
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from api.v1.router import contact_router, submit_contact_form
from schema.contact import ContactOut
from service.email import get_mailer
import handler as hlp
from config.setting import settings
from error import ContactError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Resolve the delivery strategy once, before the first request
    get_mailer()
    yield


app = FastAPI(
    title="Pixel Termo Contact API",
    version="1.0.0",
    description="Contact form relay with Turnstile verification",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


app.add_exception_handler(ContactError, hlp.contact_error_handler)
app.add_exception_handler(RequestValidationError, hlp.validation_error_handler)
app.add_exception_handler(StarletteHTTPException, hlp.http_exception_handler)
app.add_exception_handler(Exception, hlp.unexpected_error_handler)


app.include_router(contact_router, prefix=settings.API_PREFIX)
# Path the static site's page script posts to
app.add_api_route(
    "/contact.php",
    submit_contact_form,
    methods=["POST"],
    response_model=ContactOut,
    response_model_exclude_none=True,
    include_in_schema=False,
)


@app.get("/health", include_in_schema=False)
def health_check():
    return {"status": "ok", "mail_transport": settings.MAIL_TRANSPORT}


@app.get("/", include_in_schema=False)
def redirect_to_docs():
    return responses.RedirectResponse("/docs")
