"""Command discovery.

Every public module in saccadic/commands/ that defines a module-level
`command` of type Command becomes a CLI subcommand. Helper modules
start with an underscore and are skipped. Two modules claiming the same
command name is a programming error.
"""

import importlib
import logging
import pkgutil

from saccadic.core.types import Command

logger = logging.getLogger(__name__)

_registry: dict[str, Command] = {}


def command_modules() -> list[str]:
    """Names of the public modules in saccadic.commands, sorted."""
    import saccadic.commands as pkg

    return sorted(name for _finder, name, _ispkg in pkgutil.iter_modules(pkg.__path__) if not name.startswith('_'))


def discover() -> dict[str, Command]:
    """Import all command modules and return the registry."""
    if _registry:
        return _registry

    for modname in command_modules():
        cmd = getattr(module_for(modname), 'command', None)
        if not isinstance(cmd, Command):
            logger.debug('saccadic.commands.%s defines no command, skipped', modname)
            continue
        if cmd.name in _registry:
            raise RuntimeError(f'Command {cmd.name!r} is defined twice (saccadic.commands.{modname})')
        _registry[cmd.name] = cmd

    return _registry


def get(name: str) -> Command:
    """Get a command by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown command: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_commands() -> dict[str, Command]:
    """Return all registered commands."""
    return discover()


def module_for(name: str):
    """The module that defines a command (for docstring access)."""
    return importlib.import_module(f'saccadic.commands.{name}')
