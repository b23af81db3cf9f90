"""Application constants and configuration."""

from pathlib import Path

# Application metadata
APP_NAME = "unicorn-systemd"
APP_VERSION = "1.0.0"

# Paths
DEFAULT_CONFIG_FILE = Path("config") / "deploy.yml"
TEMPLATE_NAME = "unicorn.service.erb"
CUSTOM_TEMPLATE_DIR = Path("config") / "deploy" / "templates"
CUSTOM_TEMPLATE_PATH = CUSTOM_TEMPLATE_DIR / TEMPLATE_NAME

# Application resources
RESOURCES_DIR = Path(__file__).parent.parent / "templates"
BUNDLED_TEMPLATE_PATH = RESOURCES_DIR / TEMPLATE_NAME

# Systemd locations
USER_SYSTEMD_DIR = "$HOME/.config/systemd/user"
SYSTEM_SYSTEMD_DIR = "/etc/systemd/system"

# Exit codes reserved for guarded remote commands
EXIT_PLATFORM = 90
EXIT_PERMISSION = 91

# Output shown by print_remote when nothing is installed yet
PRINT_REMOTE_PLACEHOLDER = "No unicorn systemd config found on remote server"

# Marker for comment lines in the generated scripts
COMMENT_PREFIX = "----->"
