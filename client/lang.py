"""
Warden - Localization Tables
==============================
Alerts and backend error messages carry lang keys ("auth.invalid") rather
than text. The browser renders them with these tables, served by the
console at /api/lang/{locale}.

Lookup order: requested locale -> English -> the "_" bug string.
"""

FALLBACK_LOCALE = "en"

EN = {
    "form": {
        "username": "Username",
        "password": "Password",
        "login": "Login",
        "logout": "Logout",
    },
    "nav": {
        "dropdown": "Dropdown",
        "home": "Home",
        "instances": "Instances",
        "files": "Files",
        "system": "System",
    },
    "auth": {
        "success": "Logged in",
        "logout": "Logged out",
        "expired": "Your session has expired, please log in again",
        "invalid": "Invalid username or password",
        "too_many": "Too many attempt",
        "need_reset": "You need to reset your password",
    },
    "server": {
        "unreachable": "The server is unreachable",
    },
    "request": {
        "rejected": "The server rejected the request",
    },
    "response": {
        "invalid": "The server sent an unreadable response",
    },
    "_": "This is a bug, please report",
}

LOCALES: dict[str, dict] = {"en": EN}


def translate(key: str, locale: str = FALLBACK_LOCALE) -> str:
    """Resolve a dotted lang key to text."""
    for table in (LOCALES.get(locale), LOCALES[FALLBACK_LOCALE]):
        node = table
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                node = None
                break
            node = node[part]
        if isinstance(node, str):
            return node
    return EN["_"]


def pick_locale(accept_language: str | None) -> str:
    """
    Choose a supported locale from an Accept-Language header.

    Example: pick_locale("de-DE,de;q=0.9,en;q=0.8") -> "en"
    """
    if not accept_language:
        return FALLBACK_LOCALE

    ranked = []
    for i, item in enumerate(accept_language.split(",")):
        lang, _, params = item.strip().partition(";")
        q = 1.0
        if params.strip().startswith("q="):
            try:
                q = float(params.strip()[2:])
            except ValueError:
                q = 0.0
        ranked.append((-q, i, lang.split("-")[0].lower()))

    for _, _, lang in sorted(ranked):
        if lang in LOCALES:
            return lang
    return FALLBACK_LOCALE
