"""
Line-by-line transformation of .env file contents.

Only the value half of each KEY=VALUE line is touched. Comments, blank lines
and lines without an '=' are passed through exactly as they were.
"""

import enum
import logging
import typing

import attr

from .cipher import Cipher, is_likely_encrypted
from .errors import ValidationError

log = logging.getLogger(__name__)


class ProcessMode(enum.Enum):
    ENCRYPT = 'encrypt'
    DECRYPT = 'decrypt'

    def __str__(self):
        return self.value


class LineKind(enum.Enum):
    BLANK = 'blank'
    COMMENT = 'comment'
    ASSIGNMENT = 'assignment'
    UNPARSED = 'unparsed'


@attr.s(frozen=True)
class EnvLine:
    text: str = attr.ib()
    kind: LineKind = attr.ib()
    key: typing.Optional[str] = attr.ib(default=None)
    value: typing.Optional[str] = attr.ib(default=None)

    @classmethod
    def parse(cls, text: str) -> 'EnvLine':
        trimmed = text.strip()

        if not trimmed:
            return cls(text, LineKind.BLANK)

        if trimmed.startswith('#'):
            return cls(text, LineKind.COMMENT)

        key, sep, value = text.partition('=')
        if not sep:
            return cls(text, LineKind.UNPARSED)

        return cls(text, LineKind.ASSIGNMENT, key=key, value=value)

    @property
    def name(self) -> typing.Optional[str]:
        """The key without surrounding whitespace, used for reporting."""
        return self.key.strip() if self.key is not None else None


@attr.s(frozen=True)
class ProcessingResult:
    content: str = attr.ib()
    keys: typing.Tuple[str, ...] = attr.ib(converter=tuple)


def split_lines(content: str) -> typing.List[str]:
    """
    Split content into lines on '\\n'.

    A '\\r' directly before a '\\n' is dropped, and a final newline does not
    produce an extra empty line.
    """
    lines = content.split('\n')
    last = lines.pop()
    lines = [line[:-1] if line.endswith('\r') else line for line in lines]
    if last:
        lines.append(last)
    return lines


def parse(content: str) -> typing.List[EnvLine]:
    return [EnvLine.parse(line) for line in split_lines(content)]


def process_line(line: str, cipher: Cipher, mode: ProcessMode) -> str:
    parsed = EnvLine.parse(line)

    if parsed.kind is not LineKind.ASSIGNMENT:
        return line

    if mode is ProcessMode.ENCRYPT:
        return f"{parsed.key}={cipher.encrypt(parsed.value)}"

    return f"{parsed.key}={cipher.decrypt(parsed.value)}"


def process_file(content: str, cipher: Cipher, mode: ProcessMode) -> ProcessingResult:
    """
    Encrypt or decrypt every value in a file.

    Lines are re-joined with '\\n', so CRLF line endings become LF and the
    final newline is dropped. Any failing line fails the whole call.
    """
    output: typing.List[str] = []
    keys: typing.List[str] = []

    for line in split_lines(content):
        output.append(process_line(line, cipher, mode))

        parsed = EnvLine.parse(line)
        if parsed.kind is LineKind.ASSIGNMENT:
            keys.append(parsed.name)

    log.debug(f"Processed {len(keys)} variables in {len(output)} lines ({mode})")
    return ProcessingResult(content='\n'.join(output), keys=keys)


def validate_encrypted(content: str) -> None:
    """
    Check that a file looks like it has been encrypted before decrypting it.

    Passes as long as at least one value looks encrypted.
    """
    values = [line.value for line in parse(content) if line.kind is LineKind.ASSIGNMENT]

    if not values:
        raise ValidationError("File contains no environment variables")

    if not any(is_likely_encrypted(value) for value in values):
        raise ValidationError("This file appears to be unencrypted")
