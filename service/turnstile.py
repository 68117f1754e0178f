import logging
from typing import NamedTuple, Optional
import httpx
from config.setting import settings
from error import InvalidVerifierResponse

logger = logging.getLogger(__name__)


class VerificationResult(NamedTuple):
    success: bool
    error_codes: tuple[str, ...] = ()


class TurnstileVerifier:
    """Redeems a Turnstile widget token against Cloudflare's siteverify API

    One attempt per call, bounded by ``timeout``. Anything short of an
    explicit ``"success": true`` from the provider is a denial.
    """

    def __init__(
        self,
        secret_key: str,
        verify_url: str = settings.TURNSTILE_VERIFY_URL,
        timeout: float = settings.TURNSTILE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._secret_key = secret_key
        self._verify_url = verify_url
        self._timeout = timeout
        self._transport = transport

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        result = await self.check(token, remote_ip)
        return result.success

    async def check(
        self, token: str, remote_ip: Optional[str] = None
    ) -> VerificationResult:
        data = {
            "secret": self._secret_key,
            "response": token,
            "remoteip": remote_ip or "",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._verify_url, data=data)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Turnstile request failed: {type(e).__name__}: {e}"
            )
            return VerificationResult(False, ("transport-error",))

        try:
            success, error_codes = self._parse(response)
        except InvalidVerifierResponse as e:
            logger.warning(f"Turnstile returned an unusable body: {e}")
            return VerificationResult(False, ("invalid-verifier-response",))

        if not success:
            logger.warning(f"Turnstile denied token: error-codes={error_codes}")
        return VerificationResult(success, error_codes)

    @staticmethod
    def _parse(response: httpx.Response) -> tuple[bool, tuple[str, ...]]:
        try:
            body = response.json()
        except ValueError as e:
            raise InvalidVerifierResponse("body is not JSON") from e
        if not isinstance(body, dict) or not isinstance(
            body.get("success"), bool
        ):
            raise InvalidVerifierResponse("missing boolean 'success'")

        error_codes = body.get("error-codes") or []
        if not isinstance(error_codes, list):
            error_codes = [str(error_codes)]
        return body["success"] is True, tuple(str(code) for code in error_codes)


def get_verifier() -> TurnstileVerifier:
    return TurnstileVerifier(settings.TURNSTILE_SECRET_KEY)
