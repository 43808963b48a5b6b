from .dto import PasswordPolicy
from .service import BCRYPT_MAX_BYTES, CredentialService

__all__ = ["BCRYPT_MAX_BYTES", "CredentialService", "PasswordPolicy"]
