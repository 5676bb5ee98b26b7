"""Key-value option store and the settings registry that guards writes to it."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from theme.models import Option

logger = logging.getLogger("tender_spring.options")

SanitizeCallback = Callable[[Any], Any]


class OptionStore(ABC):
    """Atomic get/set of single named records."""

    @abstractmethod
    async def get(self, name: str) -> Optional[Any]:
        """Return the stored value, or None when nothing is stored under name."""

    @abstractmethod
    async def set(self, name: str, value: Any) -> None:
        """Store value under name, replacing any previous value."""


class SqlOptionStore(OptionStore):
    """Option store over the ``options`` table. One session per call, last writer wins."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, name: str) -> Optional[Any]:
        async with self._session_factory() as session:
            result = await session.execute(select(Option).where(Option.name == name))
            row = result.scalar_one_or_none()
            return row.value if row else None

    async def set(self, name: str, value: Any) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                update(Option).where(Option.name == name).values(value=value)
            )
            if result.rowcount:
                await session.commit()
                return
            session.add(Option(name=name, value=value))
            try:
                await session.commit()
                return
            except IntegrityError:
                # A concurrent first write inserted the row after our update missed it
                await session.rollback()
            await session.execute(update(Option).where(Option.name == name).values(value=value))
            await session.commit()


class SettingsRegistry:
    """Settings registration point: binds options to groups and sanitize callbacks.

    Every write goes through :meth:`update_option` or :meth:`add_option`, so a
    registered sanitize callback can never be bypassed.
    """

    def __init__(self, store: OptionStore):
        self.store = store
        self._groups: dict[str, list[str]] = {}
        self._sanitizers: dict[str, SanitizeCallback] = {}

    def register_setting(self, group: str, option_name: str, sanitize: SanitizeCallback) -> None:
        names = self._groups.setdefault(group, [])
        if option_name not in names:
            names.append(option_name)
        self._sanitizers[option_name] = sanitize

    def options_in_group(self, group: str) -> list[str]:
        return list(self._groups.get(group, []))

    def sanitize(self, option_name: str, value: Any) -> Any:
        sanitize = self._sanitizers.get(option_name)
        return sanitize(value) if sanitize else value

    async def add_option(self, option_name: str, value: Any) -> bool:
        """Store value only if option_name has no value yet. Returns whether it was written."""
        if await self.store.get(option_name) is not None:
            return False
        await self.store.set(option_name, self.sanitize(option_name, value))
        logger.info("Added option %s", option_name)
        return True

    async def update_option(self, option_name: str, value: Any) -> Any:
        """Sanitize value with the registered callback and store it. Returns the stored value."""
        clean = self.sanitize(option_name, value)
        await self.store.set(option_name, clean)
        logger.debug("Updated option %s", option_name)
        return clean
