"""Layout styles selectable on the theme options page."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ThemeStyle:
    """A layout style: form value, label and the layout defaults it implies."""

    value: str
    label: str
    defaults: dict[str, str] = field(default_factory=dict)


DEFAULT_STYLES: dict[str, ThemeStyle] = {
    "spring": ThemeStyle(
        value="spring",
        label="Spring",
        defaults={
            "sidebar": "right",
            "accent_color": "#93E9BE",
            "bg_primary": "#fdfdf8",
            "bg_secondary": "#eef7f0",
        },
    ),
    "dusk": ThemeStyle(
        value="dusk",
        label="Dusk",
        defaults={
            "sidebar": "left",
            "accent_color": "#a8f0d0",
            "bg_primary": "#0f0f12",
            "bg_secondary": "#18181c",
        },
    ),
}
