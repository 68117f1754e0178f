import logging
from typing import Optional
from error import DeliveryFailed, SmtpError, VerificationDenied
from schema.contact import ContactOut, ContactSubmission
from service.email import Mailer, MailComposer
from service.turnstile import TurnstileVerifier
from config.setting import settings

logger = logging.getLogger(__name__)

SENT_MESSAGE = "¡Mensaje enviado correctamente!"


class ContactOp:

    @staticmethod
    async def submit_contact_form(
        raw_body: bytes,
        remote_ip: Optional[str],
        verifier: TurnstileVerifier,
        composer: MailComposer,
        mailer: Mailer,
    ) -> ContactOut:
        """
        Normalize the submission, verify the sender is human and relay
        the message to the contact inbox. Each failing stage raises the
        ContactError that becomes the response.
        """
        submission = ContactSubmission.from_body(raw_body)

        result = await verifier.check(submission.verification_token, remote_ip)
        if not result.success:
            raise VerificationDenied(debug={
                "token_present": bool(submission.verification_token),
                "token_length": len(submission.verification_token),
                "secret_key_configured": bool(settings.TURNSTILE_SECRET_KEY),
                "error_codes": list(result.error_codes),
            })

        composed = composer.compose(submission)
        try:
            await mailer.deliver(submission, composed)
        except SmtpError as e:
            logger.error(f"Error al enviar email: {e.reason}")
            raise DeliveryFailed(
                debug={"transport": mailer.name, "reason": e.reason}
            ) from e
        except DeliveryFailed:
            logger.error(f"Mail submission via {mailer.name} failed")
            raise

        logger.info(f"Contact message from {submission.email} delivered "
                    f"via {mailer.name}")
        return ContactOut(success=True, message=SENT_MESSAGE)
