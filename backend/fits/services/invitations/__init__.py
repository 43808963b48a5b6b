from .dto import (
    CompleteInvitationIn,
    CreateInvitationIn,
    InvitationCreatedOut,
    InvitationSummaryOut,
    RegistrationOut,
)
from .service import InvitationService

__all__ = [
    "CompleteInvitationIn",
    "CreateInvitationIn",
    "InvitationCreatedOut",
    "InvitationService",
    "InvitationSummaryOut",
    "RegistrationOut",
]
