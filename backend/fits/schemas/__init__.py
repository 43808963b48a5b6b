from fits.schemas.auth import (
    IdentitySchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from fits.schemas.bootstrap import BootstrapResultSchema, BootstrapSchema, BootstrapStatusSchema
from fits.schemas.invitation import (
    CompleteInvitationSchema,
    CreateInvitationSchema,
    InvitationCreatedSchema,
    InvitationSummarySchema,
    RegistrationSchema,
)

__all__ = [
    "BootstrapResultSchema",
    "BootstrapSchema",
    "BootstrapStatusSchema",
    "CompleteInvitationSchema",
    "CreateInvitationSchema",
    "IdentitySchema",
    "InvitationCreatedSchema",
    "InvitationSummarySchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegistrationSchema",
    "TokenPairSchema",
    "WhoAmISchema",
]
