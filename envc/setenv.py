"""
Set variables from a plaintext .env file permanently for the current user.

On Windows this uses 'setx'. Everywhere else an export line is appended to the
user's shell configuration file.
"""

import logging
import os
import pathlib
import subprocess
import sys
import typing

from .engine import LineKind, parse
from .errors import SetEnvError

log = logging.getLogger(__name__)

QUOTES = ('"', "'")

Variable = typing.Tuple[str, str]


def unquote(value: str) -> str:
    """Remove one pair of matching quotes from around a value."""
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env(content: str) -> typing.List[Variable]:
    variables: typing.List[Variable] = []
    for line in parse(content):
        if line.kind is not LineKind.ASSIGNMENT:
            continue
        key = line.key.strip()
        if key:
            variables.append((key, unquote(line.value.strip())))
    return variables


def is_windows() -> bool:
    return sys.platform.startswith('win')


def shell_config_path(home: pathlib.Path, shell: str) -> pathlib.Path:
    return home / ('.zshrc' if 'zsh' in shell else '.bashrc')


def default_shell_config() -> pathlib.Path:
    try:
        home = pathlib.Path(os.environ['HOME'])
    except KeyError:
        raise SetEnvError("HOME is not set") from None
    return shell_config_path(home, os.environ.get('SHELL', ''))


def describe_target() -> str:
    if is_windows():
        return "User Environment Variables (requires restart to take effect)"
    return "shell config file (~/.bashrc or ~/.zshrc)"


def setx(key: str, value: str) -> None:
    try:
        subprocess.run(
            ('setx', key, value),
            encoding='utf-8',
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True)
    except subprocess.CalledProcessError as error:
        for line in error.stderr.splitlines():
            log.error(line)
        raise SetEnvError(f"Failed to set {key}: {error.stderr.strip()}") from error
    except OSError as error:
        raise SetEnvError(f"Failed to set {key}: {error}") from error


def append_export(config: pathlib.Path, key: str, value: str) -> None:
    log.debug(f"Appending export of {key} to {config}")
    try:
        with config.open('a', encoding='utf-8') as file:
            file.write(f'export {key}="{value}"\n')
    except OSError as error:
        raise SetEnvError(f"Failed to set {key}: {error}") from error


def set_permanent(key: str, value: str, config: typing.Optional[pathlib.Path] = None) -> None:
    if is_windows():
        setx(key, value)
    else:
        append_export(config if config is not None else default_shell_config(), key, value)


def preview(value: str, width: int = 20) -> str:
    return f"{value[:width]}..." if len(value) > width else value
