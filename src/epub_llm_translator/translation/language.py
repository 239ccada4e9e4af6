from enum import Enum


class Language(Enum):
    SIMPLIFIED_CHINESE = "Simplified Chinese"
    TRADITIONAL_CHINESE = "Traditional Chinese"
    ENGLISH = "English"
    FRENCH = "French"
    GERMAN = "German"
    SPANISH = "Spanish"
    RUSSIAN = "Russian"
    ITALIAN = "Italian"
    PORTUGUESE = "Portuguese"
    JAPANESE = "Japanese"
    KOREAN = "Korean"

    @property
    def instruction(self) -> str:
        """Consigne de langue cible prête à l'emploi."""
        return f"Translate this text into {self.value}"
