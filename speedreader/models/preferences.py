"""User preference data models."""

from typing import Literal

from pydantic import BaseModel, Field

ThemeOption = Literal["dark", "light", "sepia", "forest"]
ReadingMode = Literal["rsvp", "traditional"]


class AccessibilitySettings(BaseModel):
    """Reader accessibility options."""

    dyslexic_font: bool = False
    font_size: int = 18
    letter_spacing: float = 0
    line_height: float = 1.6
    word_spacing: float = 0
    high_contrast: bool = False
    reduced_motion: bool = False


class UserPreferences(BaseModel):
    """Persisted reader preferences."""

    default_speed: int = 300
    theme: ThemeOption = "dark"
    orp_highlight_color: str = "#60a5fa"
    background_color: str = "#0a0a0f"
    text_color: str = "#f5f5f5"
    font: str = "Geist"
    font_size: int = 18
    punctuation_pause: int = 150  # milliseconds
    auto_save: bool = True
    last_used_mode: ReadingMode = "rsvp"
    show_wpm: bool = True
    words_per_chunk: Literal[1, 2, 3] = 1
    accessibility: AccessibilitySettings = Field(default_factory=AccessibilitySettings)
