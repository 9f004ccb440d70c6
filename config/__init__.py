import os

_ENVIRONMENTS = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Dotted path of the settings module to load.

    ``ACADEMIC_RECORDS_SETTINGS`` names a module outright; otherwise
    ``APP_ENV`` picks one, falling back to development.
    """
    explicit = os.getenv("ACADEMIC_RECORDS_SETTINGS", "").strip()
    if explicit:
        return explicit

    return _ENVIRONMENTS.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
