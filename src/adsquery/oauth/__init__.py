from adsquery.oauth.callback import CallbackListener, PendingAuthorization, create_callback_app
from adsquery.oauth.errors import AuthorizationError
from adsquery.oauth.flow import (
    ADWORDS_SCOPE,
    TokenResponse,
    build_authorization_url,
    capture_authorization_code,
    exchange_code,
    obtain_refresh_token,
    refresh_access_token,
)

__all__ = [
    "ADWORDS_SCOPE",
    "AuthorizationError",
    "CallbackListener",
    "PendingAuthorization",
    "TokenResponse",
    "build_authorization_url",
    "capture_authorization_code",
    "create_callback_app",
    "exchange_code",
    "obtain_refresh_token",
    "refresh_access_token",
]
