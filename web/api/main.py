"""FastAPI admin app - serves the theme options page."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from theme.models.base import async_session_factory, init_db
from theme.services.option_store import SettingsRegistry, SqlOptionStore
from theme.services.theme_options import ThemeOptions
from theme.services.theme_styles import DEFAULT_STYLES

from web.api.auth_routes import router as auth_router
from web.api.theme_options_routes import router as theme_options_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(title="Tender Spring Theme Options", lifespan=lifespan)

_store = SqlOptionStore(async_session_factory)
app.state.settings_registry = SettingsRegistry(_store)
app.state.theme_options = ThemeOptions(_store, styles=DEFAULT_STYLES)

app.include_router(auth_router)
app.include_router(theme_options_router)


@app.get("/api/health")
async def health():
    """Health check."""
    return {"status": "ok"}
