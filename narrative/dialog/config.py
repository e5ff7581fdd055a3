"""Dialog runtime configuration."""

from __future__ import annotations

from pathlib import Path


class DialogConfig:
    """Configuration for the dialog runtime."""

    def __init__(
        self,
        typing_speed: float = 0.02,
        cursor_character: str = "█",
        cursor_blink_speed: float = 1.0,
        enable_terminal_cursor: bool = True,
        enable_text_control: bool = True,
        navigation_cooldown: float = 0.2,
        navigation_threshold: float = 0.5,
        skip_settle_delay: float = 0.5,
        auto_advance_delay: float = 0.5,
        dialog_base_path: str | Path = "Dialogs",
        default_language: str = "en",
        app_data_path: str | Path = "game/data",
        snapshot_extension: str = ".ekqolt",
        localization_timeout: float = 10.0,
        localization_poll_interval: float = 0.1,
        watch_debounce: float = 0.5,
    ):
        self.typing_speed = typing_speed
        self.cursor_character = cursor_character
        # Toggles per second
        self.cursor_blink_speed = cursor_blink_speed
        self.enable_terminal_cursor = enable_terminal_cursor
        self.enable_text_control = enable_text_control
        self.navigation_cooldown = navigation_cooldown
        self.navigation_threshold = navigation_threshold
        self.skip_settle_delay = skip_settle_delay
        self.auto_advance_delay = auto_advance_delay
        self.dialog_base_path = Path(dialog_base_path)
        self.default_language = default_language
        self.app_data_path = Path(app_data_path)
        self.snapshot_extension = snapshot_extension
        self.localization_timeout = localization_timeout
        self.localization_poll_interval = localization_poll_interval
        self.watch_debounce = watch_debounce

    @property
    def snapshot_dir(self) -> Path:
        return self.app_data_path / "DialogCache"
