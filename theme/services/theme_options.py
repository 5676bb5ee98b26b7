"""Theme options: the default record, input validation and reads of the stored record."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence

import bleach

import config
from theme.services.option_store import OptionStore, SettingsRegistry
from theme.services.theme_styles import ThemeStyle

logger = logging.getLogger("tender_spring.options")

SUPPORT_ON = "on"
SUPPORT_OFF = "off"

DefaultsFilter = Callable[[dict[str, Any]], dict[str, Any]]
ValidateFilter = Callable[[dict[str, Any], Mapping[str, Any], dict[str, Any]], dict[str, Any]]
LayoutFilter = Callable[[dict[str, Any]], dict[str, Any]]


def strip_markup(value: str) -> str:
    """Remove every HTML tag and comment from value, keeping the text between tags."""
    return bleach.clean(value, tags=set(), attributes={}, strip=True, strip_comments=True)


class ThemeOptions:
    """Owns the theme options record stored under a single option name.

    Filters are plain functions applied in order: default filters receive the
    default record, validate filters receive ``(validated, raw_input, defaults)``
    and layout filters receive the layout defaults. Each returns the (possibly
    modified) record.
    """

    def __init__(
        self,
        store: OptionStore,
        *,
        option_name: str = config.THEME_OPTIONS_NAME,
        group: str = config.THEME_OPTIONS_GROUP,
        styles: Optional[Mapping[str, ThemeStyle]] = None,
        default_filters: Sequence[DefaultsFilter] = (),
        validate_filters: Sequence[ValidateFilter] = (),
        layout_filters: Sequence[LayoutFilter] = (),
    ):
        self.store = store
        self.option_name = option_name
        self.group = group
        self.styles: dict[str, ThemeStyle] = dict(styles or {})
        self.default_filters = list(default_filters)
        self.validate_filters = list(validate_filters)
        self.layout_filters = list(layout_filters)

    @property
    def fields(self) -> tuple[str, ...]:
        if self.styles:
            return ("theme_style", "custom_css", "support")
        return ("custom_css", "support")

    def get_default_options(self) -> dict[str, Any]:
        defaults: dict[str, Any] = {"custom_css": "", "support": SUPPORT_OFF}
        if self.styles:
            defaults["theme_style"] = next(iter(self.styles))
        for apply_filter in self.default_filters:
            defaults = apply_filter(defaults)
        return defaults

    async def get_current_options(self) -> dict[str, Any]:
        """Stored record with missing fields filled from defaults; defaults if nothing is stored."""
        defaults = self.get_default_options()
        stored = await self.store.get(self.option_name)
        if stored is None:
            return defaults
        if not isinstance(stored, Mapping):
            logger.warning("Ignoring malformed %s record of type %s", self.option_name, type(stored).__name__)
            return defaults
        current = dict(defaults)
        for key in self.fields:
            if self._is_canonical(key, stored.get(key)):
                current[key] = stored[key]
        return current

    def _is_canonical(self, key: str, value: Any) -> bool:
        if key == "support":
            return value in (SUPPORT_ON, SUPPORT_OFF)
        if key == "theme_style":
            return isinstance(value, str) and value in self.styles
        return isinstance(value, str)

    def validate(self, raw: Any) -> dict[str, Any]:
        """Turn submitted form data into a complete, safe options record. Never raises."""
        data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
        defaults = self.get_default_options()
        output = dict(defaults)

        theme_style = data.get("theme_style")
        if isinstance(theme_style, str) and theme_style in self.styles:
            output["theme_style"] = theme_style

        # An unchecked checkbox is not submitted at all
        output["support"] = SUPPORT_ON if data.get("support") == SUPPORT_ON else SUPPORT_OFF

        custom_css = data.get("custom_css")
        if isinstance(custom_css, str):
            output["custom_css"] = strip_markup(custom_css)

        for apply_filter in self.validate_filters:
            output = apply_filter(output, data, defaults)
        return output

    async def initialize(self, registry: SettingsRegistry) -> None:
        """Seed the default record if none is stored and make validate the save-time gatekeeper."""
        registry.register_setting(self.group, self.option_name, self.validate)
        await registry.add_option(self.option_name, self.get_default_options())

    async def reset(self, registry: SettingsRegistry) -> dict[str, Any]:
        """Replace the stored record with the defaults, through the registry."""
        defaults = self.get_default_options()
        logger.info("Resetting %s to defaults", self.option_name)
        return await registry.update_option(self.option_name, defaults)

    async def get_layout_defaults(self) -> dict[str, Any]:
        """Layout defaults of the selected style, or of the default style if it is unknown."""
        if not self.styles:
            return {}
        current = await self.get_current_options()
        style = self.styles.get(current.get("theme_style"))
        if style is None:
            style = self.styles.get(self.get_default_options().get("theme_style"))
        defaults = dict(style.defaults) if style else {}
        for apply_filter in self.layout_filters:
            defaults = apply_filter(defaults)
        return defaults
