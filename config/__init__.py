import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; anything unrecognised means development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def work_policy_defaults() -> dict:
    """Initial working-hours settings; each field can be overridden from the environment."""
    return {
        "normalStartTime": os.getenv("NORMAL_START_TIME", "09:00"),
        "normalEndTime": os.getenv("NORMAL_END_TIME", "17:00"),
        "overtimeStartTime": os.getenv("OVERTIME_START_TIME", "17:00"),
        "overtimeEndTime": os.getenv("OVERTIME_END_TIME", "22:00"),
        "normalRate": os.getenv("DEFAULT_NORMAL_RATE", "20.00"),
        "overtimeRate": os.getenv("DEFAULT_OVERTIME_RATE", "35.00"),
    }
