"""Locale provider backed by configuration."""

from dataclasses import dataclass

from smart_diet.services.analysis import LocaleProvider


@dataclass(frozen=True)
class SettingsLocaleProvider(LocaleProvider):
    """Returns the display language configured for the deployment."""

    language: str = "English"

    def display_language(self) -> str:
        """Return the configured language, falling back to English."""
        return self.language.strip() or "English"
