"""
Find .env files in a directory and pair them with their output names.

Files are classified by name alone, never by their contents.
"""

import enum
import logging
import os
import pathlib
import typing

import attr

from .engine import LineKind, ProcessMode, parse

log = logging.getLogger(__name__)

ENV_PREFIX = '.env'
ENCRYPTED_SUFFIX = '.enc'
ENCRYPTED_SUFFIXES = ('.enc', '.encrypted')


class Category(enum.Enum):
    PLAIN = 'plain'
    ENCRYPTED = 'encrypted'
    NEITHER = 'neither'


def is_plain_env_file(filename: str) -> bool:
    """A plaintext file starts with '.env' and has no encrypted suffix."""
    return filename.startswith(ENV_PREFIX) and not filename.endswith(ENCRYPTED_SUFFIXES)


def is_encrypted_env_file(filename: str) -> bool:
    """An encrypted file mentions '.env' anywhere and has an encrypted suffix."""
    return ENV_PREFIX in filename and filename.endswith(ENCRYPTED_SUFFIXES)


def classify(filename: str, mode: ProcessMode) -> Category:
    """Decide if a file is a valid input for a mode."""
    if mode is ProcessMode.ENCRYPT and is_plain_env_file(filename):
        return Category.PLAIN
    if mode is ProcessMode.DECRYPT and is_encrypted_env_file(filename):
        return Category.ENCRYPTED
    return Category.NEITHER


def derive_output_name(path: typing.Union[str, os.PathLike], mode: ProcessMode) -> pathlib.Path:
    """
    Modify the name of a path to the name used for the opposite mode.

    Encrypting appends '.enc'. Decrypting removes one '.enc' or, failing that,
    one '.encrypted' suffix, and leaves other names as they are.
    """
    name = os.fspath(path)

    if mode is ProcessMode.ENCRYPT:
        return pathlib.Path(f"{name}{ENCRYPTED_SUFFIX}")

    for suffix in ENCRYPTED_SUFFIXES:
        if name.endswith(suffix):
            return pathlib.Path(name[:-len(suffix)])

    return pathlib.Path(name)


def count_variables(path: pathlib.Path) -> int:
    """Count the KEY=VALUE lines in a file, or 0 if it can't be read."""
    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as error:
        log.debug(f"Could not count variables in {path}: {error}")
        return 0

    return sum(1 for line in parse(content) if line.kind is LineKind.ASSIGNMENT)


@attr.s(frozen=True)
class FileRecord:
    path: pathlib.Path = attr.ib()
    category: Category = attr.ib()
    variables: int = attr.ib()

    def __str__(self):
        return self.path.name

    @property
    def name(self) -> str:
        return self.path.name


def find_env_files(
        directory: pathlib.Path,
        mode: ProcessMode) -> typing.Sequence[pathlib.Path]:
    """Find regular files in a directory (not subdirectories) that are inputs for a mode."""
    try:
        entries = list(directory.iterdir())
    except OSError as error:
        log.debug(f"Could not list {directory}: {error}")
        return ()

    files = [p for p in entries if p.is_file() and classify(p.name, mode) is not Category.NEITHER]
    return tuple(sorted(files, key=lambda p: p.name))


def scan_directory(
        directory: pathlib.Path,
        mode: ProcessMode) -> typing.Sequence[FileRecord]:
    log.info(f"Searching for files to {mode} in {directory}")

    records = tuple(FileRecord(
        path=path,
        category=classify(path.name, mode),
        variables=count_variables(path),
    ) for path in find_env_files(directory, mode))

    log.info(f"Search found {len(records)} files to {mode} in {directory}")
    return records
