import pathlib
import typing

from .cipher import Cipher, Password
from .engine import ProcessMode, ProcessingResult
from .envfiles import Batch, EnvFile


def encrypt_file(
        source: pathlib.Path,
        password: str,
        target: typing.Optional[pathlib.Path] = None) -> ProcessingResult:
    return EnvFile.for_source(source, ProcessMode.ENCRYPT, target).process(Cipher(Password(password)))


def decrypt_file(
        source: pathlib.Path,
        password: str,
        target: typing.Optional[pathlib.Path] = None) -> ProcessingResult:
    return EnvFile.for_source(source, ProcessMode.DECRYPT, target).process(Cipher(Password(password)))


def batch(directory: pathlib.Path, mode: ProcessMode) -> Batch:
    return Batch.scan(directory, mode)
