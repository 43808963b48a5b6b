from .dto import BootstrapIn, BootstrapOut
from .service import BootstrapService, canonical_json

__all__ = ["BootstrapIn", "BootstrapOut", "BootstrapService", "canonical_json"]
