"""Helper for running privileged steps as the setup user."""

import contextlib
import logging
from typing import Callable, Iterator, TypeVar

from .config_manager import SettingsStore
from ..models.service import ElevationContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PrivilegeElevator:
    """Scopes remote commands under ``setup_user`` instead of ``user``.

    The caller's settings are never written to. Inside the scope the block
    receives a derived store whose ``user`` is the setup user, so the
    original identity is back in effect as soon as the scope exits, even
    when the block raised.
    """

    @staticmethod
    def context(settings: SettingsStore) -> ElevationContext:
        """Get the identities for an elevated block.

        Args:
            settings: Current settings

        Returns:
            ElevationContext with setup_user falling back to user
        """
        user = settings.fetch("user")
        setup_user = settings.fetch("setup_user") or user
        return ElevationContext(original_user=user, setup_user=setup_user)

    @staticmethod
    @contextlib.contextmanager
    def elevated(settings: SettingsStore) -> Iterator[SettingsStore]:
        """Yield the settings privileged commands must run with."""
        ctx = PrivilegeElevator.context(settings)
        if not ctx.elevated:
            yield settings
            return

        logger.info(f"Switching to setup_user ({ctx.setup_user})")
        try:
            yield settings.with_overrides(user=ctx.setup_user)
        finally:
            logger.debug(f"Back to user ({ctx.original_user})")

    @staticmethod
    def with_elevation(settings: SettingsStore, block: Callable[[SettingsStore], T]) -> T:
        """Call ``block`` with the elevated settings and return its result."""
        with PrivilegeElevator.elevated(settings) as acting:
            return block(acting)
