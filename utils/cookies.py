from flask import Response, current_app

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _get_cookie_kwargs():
    cfg = current_app.config
    return {
        "httponly": True,
        "secure": cfg.get("COOKIE_SECURE", True),
        "samesite": cfg.get("COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_session_cookies(resp: Response, access_token: str, refresh_token: str) -> Response:
    cfg = current_app.config
    kwargs = _get_cookie_kwargs()
    resp.set_cookie(
        ACCESS_COOKIE,
        access_token,
        max_age=int(cfg["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        **kwargs,
    )
    resp.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        max_age=int(cfg["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        **kwargs,
    )
    return resp


def clear_session_cookies(resp: Response) -> Response:
    kwargs = _get_cookie_kwargs()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        resp.delete_cookie(name, **kwargs)
    return resp
