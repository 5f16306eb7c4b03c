"""
settings.py

Persistent settings management for the situation plan editor.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/sitplan/settings.toml
    - macOS: ~/Library/Application Support/sitplan/settings.toml
    - Linux: ~/.config/sitplan/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "sitplan"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasSelectionSettings:
    """Selection appearance settings.

    Defaults:
        padding: 5.0
        outline_color: "#0078D7"
    """
    padding: float = 5.0              # Default: 5.0 pixels around every box
    outline_color: str = "#0078D7"    # Default: blue


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        min: 0.1
        max: 5.0
        step: 0.1
        wheel_factor: 1.15
        paper_padding: 20.0
    """
    min: float = 0.1             # Default: 0.1
    max: float = 5.0             # Default: 5.0
    step: float = 0.1            # Default: 0.1 per zoom button click
    wheel_factor: float = 1.15   # Default: 1.15 (15% per scroll step)
    paper_padding: float = 20.0  # Default: 20.0 pixels around the paper on zoom-to-fit


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    selection: CanvasSelectionSettings = field(default_factory=CanvasSelectionSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Paper, label and placement settings
# =============================================================================

@dataclass
class PaperSettings:
    """Printable paper size in canvas units (A4 landscape at 96 dpi).

    Defaults:
        width: 1123
        height: 794
    """
    width: float = 1123.0   # Default: 1123
    height: float = 794.0   # Default: 794


@dataclass
class LabelSettings:
    """Label text settings.

    Defaults:
        font_family: "Arial"
        default_font_size: 11
    """
    font_family: str = "Arial"     # Default: "Arial"
    default_font_size: int = 11    # Default: 11 pixels


@dataclass
class PlacementSettings:
    """Where newly added elements are placed on the active page.

    Defaults:
        insert_x: 550
        insert_y: 300
    """
    insert_x: float = 550.0   # Default: 550
    insert_y: float = 300.0   # Default: 300


@dataclass
class HistorySettings:
    """Undo/redo settings.

    Defaults:
        undo_limit: 100
    """
    undo_limit: int = 100  # Default: 100 checkpoints


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        workspace_dir: Default directory for opening images.
        canvas: Canvas-related settings.
        paper: Paper size.
        labels: Label text settings.
        placement: Insertion point for new elements.
        history: Undo/redo settings.
    """
    # Workspace directory for image import (empty = ~/Documents/SitPlan)
    workspace_dir: str = ""

    # Nested settings categories
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    paper: PaperSettings = field(default_factory=PaperSettings)
    labels: LabelSettings = field(default_factory=LabelSettings)
    placement: PlacementSettings = field(default_factory=PlacementSettings)
    history: HistorySettings = field(default_factory=HistorySettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
    """

    def __init__(self, app_name: str = APP_NAME):
        self.settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except Exception:
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.workspace_dir = general.get("workspace_dir", settings.workspace_dir)

        # Canvas section
        canvas = data.get("canvas", {})
        if "selection" in canvas:
            sel = canvas["selection"]
            settings.canvas.selection.padding = sel.get("padding", settings.canvas.selection.padding)
            settings.canvas.selection.outline_color = sel.get("outline_color", settings.canvas.selection.outline_color)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.min = zm.get("min", settings.canvas.zoom.min)
            settings.canvas.zoom.max = zm.get("max", settings.canvas.zoom.max)
            settings.canvas.zoom.step = zm.get("step", settings.canvas.zoom.step)
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)
            settings.canvas.zoom.paper_padding = zm.get("paper_padding", settings.canvas.zoom.paper_padding)

        paper = data.get("paper", {})
        settings.paper.width = paper.get("width", settings.paper.width)
        settings.paper.height = paper.get("height", settings.paper.height)

        labels = data.get("labels", {})
        settings.labels.font_family = labels.get("font_family", settings.labels.font_family)
        settings.labels.default_font_size = labels.get("default_font_size", settings.labels.default_font_size)

        placement = data.get("placement", {})
        settings.placement.insert_x = placement.get("insert_x", settings.placement.insert_x)
        settings.placement.insert_y = placement.get("insert_y", settings.placement.insert_y)

        history = data.get("history", {})
        settings.history.undo_limit = history.get("undo_limit", settings.history.undo_limit)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "workspace_dir": s.workspace_dir,
            },
            "canvas": {
                "selection": {
                    "padding": s.canvas.selection.padding,
                    "outline_color": s.canvas.selection.outline_color,
                },
                "zoom": {
                    "min": s.canvas.zoom.min,
                    "max": s.canvas.zoom.max,
                    "step": s.canvas.zoom.step,
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                    "paper_padding": s.canvas.zoom.paper_padding,
                },
            },
            "paper": {
                "width": s.paper.width,
                "height": s.paper.height,
            },
            "labels": {
                "font_family": s.labels.font_family,
                "default_font_size": s.labels.default_font_size,
            },
            "placement": {
                "insert_x": s.placement.insert_x,
                "insert_y": s.placement.insert_y,
            },
            "history": {
                "undo_limit": s.history.undo_limit,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_workspace_dir(self) -> Path:
        """Get the resolved workspace directory path.

        Returns:
            Path to workspace directory. Falls back to ~/Documents/SitPlan
            if workspace_dir setting is empty.
        """
        if self.settings.workspace_dir:
            return Path(self.settings.workspace_dir)
        return Path.home() / "Documents" / "SitPlan"

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
