from __future__ import annotations


class AuthorizationError(RuntimeError):
    pass
