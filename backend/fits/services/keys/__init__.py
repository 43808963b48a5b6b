from .dto import KeyPair, KeyPaths
from .service import KeyService

__all__ = ["KeyPair", "KeyPaths", "KeyService"]
