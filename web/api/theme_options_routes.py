"""Theme options admin page: render the options form and save submissions."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

import config
from theme.models import User
from theme.services.option_store import SettingsRegistry
from theme.services.theme_options import SUPPORT_OFF, SUPPORT_ON, ThemeOptions
from web.auth import create_nonce, require_capability, verify_nonce

logger = logging.getLogger("tender_spring.web")

router = APIRouter(tags=["theme-options"])

PAGE_TITLE = "Theme Options"
PAGE_PATH = "/admin/theme-options"

# Form fields that belong to the page chrome, not to any option
_FORM_CONTROL_FIELDS = ("option_page", "_nonce", "submit", "reset")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

require_theme_editor = require_capability(config.THEME_OPTIONS_CAPABILITY)


def get_settings_registry(request: Request) -> SettingsRegistry:
    return request.app.state.settings_registry


def get_theme_options(request: Request, user: User = Depends(require_theme_editor)) -> ThemeOptions:
    return request.app.state.theme_options


async def get_initialized_theme_options(
    theme_options: ThemeOptions = Depends(get_theme_options),
    registry: SettingsRegistry = Depends(get_settings_registry),
) -> ThemeOptions:
    """Theme options for an admin request, initialized (seeded and registered) for it."""
    await theme_options.initialize(registry)
    return theme_options


def nonce_action(group: str) -> str:
    return f"{group}-options"


class ThemeOptionsResponse(BaseModel):
    custom_css: str
    support: str
    support_banner_enabled: bool
    theme_style: Optional[str] = None
    layout: dict[str, Any]


@router.get(PAGE_PATH, response_class=HTMLResponse)
async def render_theme_options_page(
    request: Request,
    settings_updated: Optional[str] = Query(None, alias="settings-updated"),
    user: User = Depends(require_theme_editor),
    theme_options: ThemeOptions = Depends(get_initialized_theme_options),
):
    """Render the theme options form pre-filled with the current options."""
    options = await theme_options.get_current_options()
    return templates.TemplateResponse(
        request,
        "theme_options.html",
        {
            "page_title": f"{config.THEME_NAME} {PAGE_TITLE}",
            "theme_name": config.THEME_NAME,
            "action": PAGE_PATH,
            "group": theme_options.group,
            "nonce": create_nonce(user.username, nonce_action(theme_options.group)),
            "options": options,
            "styles": list(theme_options.styles.values()),
            "support_on": options.get("support") == SUPPORT_ON,
            "settings_updated": settings_updated,
        },
    )


@router.post(PAGE_PATH)
async def save_theme_options(
    request: Request,
    user: User = Depends(require_theme_editor),
    theme_options: ThemeOptions = Depends(get_theme_options),
    registry: SettingsRegistry = Depends(get_settings_registry),
):
    """Save the posted settings group through the registry, then redirect back to the page."""
    form = await request.form()
    group = form.get("option_page")
    if not isinstance(group, str) or not verify_nonce(form.get("_nonce"), user.username, nonce_action(group)):
        raise HTTPException(403, "The link you followed has expired.")

    submitted = {key: value for key, value in form.items() if key not in _FORM_CONTROL_FIELDS}
    try:
        await theme_options.initialize(registry)
        option_names = registry.options_in_group(group)
        if not option_names:
            raise HTTPException(403, "Options page not found in the allowed options list.")
        if "reset" in form:
            await theme_options.reset(registry)
        else:
            for option_name in option_names:
                await registry.update_option(option_name, submitted)
    except SQLAlchemyError:
        logger.exception("Saving settings group %s failed", group)
        return RedirectResponse(f"{PAGE_PATH}?settings-updated=false", status_code=303)
    logger.info("Saved settings group %s", group)
    return RedirectResponse(f"{PAGE_PATH}?settings-updated=true", status_code=303)


@router.get("/api/theme-options", response_model=ThemeOptionsResponse)
async def get_theme_options_json(theme_options: ThemeOptions = Depends(get_initialized_theme_options)):
    """Current theme options and the layout defaults of the selected style."""
    options = await theme_options.get_current_options()
    return ThemeOptionsResponse(
        custom_css=options.get("custom_css", ""),
        support=options.get("support", SUPPORT_OFF),
        support_banner_enabled=options.get("support") == SUPPORT_ON,
        theme_style=options.get("theme_style"),
        layout=await theme_options.get_layout_defaults(),
    )
