"""Install and control a Unicorn application server as a systemd service."""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
