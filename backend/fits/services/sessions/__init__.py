from .dto import LoginIn, LoginOut, LogoutIn, RefreshIn
from .service import SessionService, open_session

__all__ = ["LoginIn", "LoginOut", "LogoutIn", "RefreshIn", "SessionService", "open_session"]
