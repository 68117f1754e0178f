from api.v1.router.contact import contact_router, submit_contact_form

__all__ = ["contact_router", "submit_contact_form"]
