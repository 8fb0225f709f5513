import os


def get_settings_module() -> str:
    # Settings module is picked from APP_ENV, defaulting to 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "timekeeping.config.production"

    if env in {"test", "testing"}:
        return "timekeeping.config.testing"

    return "timekeeping.config.development"


def channels_from_env(default: str = "mousemove,mousedown,click,scroll,keypress") -> tuple[str, ...]:
    raw = os.getenv("ACTIVITY_CHANNELS", default)
    return tuple(c.strip() for c in raw.split(",") if c.strip())
