from typing import Optional


class ContactError(Exception):
    """Base class for contact form errors

    Every error knows the HTTP status and the client-facing
    message it maps to. ``debug`` holds sanitized diagnostics
    that may be echoed back when debug output is enabled.
    """

    def __init__(self, msg="Error interno del servidor", status_code=500,
                 debug: Optional[dict] = None):
        self.msg = msg
        self.status_code = status_code
        self.debug = debug
        super().__init__(self.msg)


class MethodNotAllowed(ContactError):
    """Raised when the endpoint is called with anything but POST"""

    def __init__(self, msg="Método no permitido", status_code=405):
        super().__init__(msg=msg, status_code=status_code)


class MalformedInput(ContactError):
    """Raised when the request body is not a JSON object"""

    def __init__(self, msg="Faltan campos requeridos", status_code=400):
        super().__init__(msg=msg, status_code=status_code)


class MissingField(ContactError):
    """Raised when a required field is absent or blank"""

    def __init__(self, field: str, msg="Faltan campos requeridos",
                 status_code=400):
        self.field = field
        super().__init__(msg=msg, status_code=status_code)


class InvalidEmail(ContactError):
    """Raised when the submitted address is not well formed"""

    def __init__(self, msg="Email inválido", status_code=400):
        super().__init__(msg=msg, status_code=status_code)


class VerificationDenied(ContactError):
    """Raised when the submitter could not be verified as human"""

    def __init__(self, msg="Verificación de humanidad fallida",
                 status_code=403, debug: Optional[dict] = None):
        super().__init__(msg=msg, status_code=status_code, debug=debug)


class DeliveryFailed(ContactError):
    """Raised when the message could not be handed to the mail transport"""

    def __init__(self, msg="Error al enviar el mensaje. Intenta nuevamente.",
                 status_code=500, debug: Optional[dict] = None):
        super().__init__(msg=msg, status_code=status_code, debug=debug)


class InvalidVerifierResponse(Exception):
    """Raised when the verification provider answers with an unusable body"""


class SmtpError(Exception):
    """Raised when the authenticated SMTP session fails"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
