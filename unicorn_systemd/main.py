#!/usr/bin/env python3
"""Entry point for the unicorn-systemd command line tool."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .core.command_runner import CommandRunner
from .core.config_manager import SettingsStore, resolve_service_config
from .core.inspector import RemoteInspector
from .core.installer import ServiceInstaller, generate
from .core.service_manager import VERBS, ServiceManager
from .core.template_manager import TemplateResolver
from .utils.constants import APP_NAME, APP_VERSION, DEFAULT_CONFIG_FILE
from .utils.errors import ConfigError, UnicornSystemdError

TASKS = {
    "generate": "Generate Unicorn systemd service template in the local repo to customize it",
    "setup": "Setup Unicorn systemd service on the remote server (but doesn't start it)",
    "status": "Get the status of the Unicorn systemd service on the remote server",
    "start": "Start the Unicorn systemd service on the remote server",
    "stop": "Stop the Unicorn systemd service on the remote server",
    "restart": "Restart the Unicorn systemd service on the remote server",
    "enable": "Enable the Unicorn systemd service on the remote server",
    "disable": "Disable the Unicorn systemd service on the remote server",
    "print": "Print Unicorn systemd service config expanded from the local template",
    "print_remote": "Print current Unicorn systemd service config from remote",
}

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Set up application logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def parse_overrides(pairs: List[str]) -> Dict[str, object]:
    """Parse ``KEY=VALUE`` pairs; values are read as YAML scalars.

    Raises:
        ConfigError: If a pair has no '='
    """
    overrides = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"Invalid setting {pair!r}, expected KEY=VALUE")
        overrides[key.strip()] = yaml.safe_load(value) if value else None
    return overrides


def build_parser() -> argparse.ArgumentParser:
    epilog = "\n".join(f"  {name:<14}{description}" for name, description in TASKS.items())
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} - Manage a Unicorn server as a systemd service",
        epilog=f"tasks:\n{epilog}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('task', choices=list(TASKS), metavar='TASK',
                        help='Task to run (see below)')
    parser.add_argument('-c', '--config', type=Path,
                        help=f'YAML settings file (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('-s', '--set', dest='overrides', action='append', default=[],
                        metavar='KEY=VALUE', help='Override a setting (repeatable)')
    parser.add_argument('-n', '--simulate', action='store_true',
                        help='Print the generated commands instead of running them')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {APP_VERSION}')
    return parser


def run_task(task: str, settings: SettingsStore, simulate: bool = False,
             working_dir: Optional[Path] = None):
    """Run one task to completion.

    Args:
        task: Task name from TASKS
        settings: Loaded settings
        simulate: Print scripts instead of running them
        working_dir: Local project directory (defaults to the current directory)
    """
    if task == "generate":
        generate(working_dir=working_dir, simulate=simulate)
        return

    service = resolve_service_config(settings)
    runner = CommandRunner(settings, simulate=simulate)

    if task in ("setup", "print", "print_remote"):
        installer = ServiceInstaller(service, settings, runner,
                                     resolver=TemplateResolver(working_dir))
        if task == "setup":
            installer.setup()
        elif task == "print":
            RemoteInspector(installer).print_local()
        else:
            RemoteInspector(installer).print_remote()
        return

    manager = ServiceManager(service, settings, runner)
    if task == "status":
        manager.status()
    elif task in VERBS:
        getattr(manager, task)()
    else:
        raise ConfigError(f"Unknown task: {task}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        overrides = parse_overrides(args.overrides)
        config_path = args.config or DEFAULT_CONFIG_FILE
        settings = SettingsStore.load(config_path, required=args.config is not None,
                                      overrides=overrides)

        run_task(args.task, settings, simulate=args.simulate)
        return 0

    except UnicornSystemdError as e:
        logger.error(str(e))
        return e.exit_code
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
