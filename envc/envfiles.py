import logging
import os.path
import pathlib
import typing

import attr

from .cipher import Cipher
from .engine import ProcessMode, ProcessingResult, process_file, validate_encrypted
from .errors import EnvcException, FileOperationError, NoCandidateFiles
from .scanner import derive_output_name, scan_directory
from .utils import atomic_write, read_text

log = logging.getLogger(__name__)


@attr.s(frozen=True, kw_only=True)
class EnvFile:
    source: pathlib.Path = attr.ib()
    target: pathlib.Path = attr.ib()
    mode: ProcessMode = attr.ib()

    @classmethod
    def for_source(
            cls,
            source: pathlib.Path,
            mode: ProcessMode,
            target: typing.Optional[pathlib.Path] = None) -> 'EnvFile':
        return cls(
            source=source,
            target=target if target is not None else derive_output_name(source, mode),
            mode=mode)

    def __str__(self):
        return self.source.name

    def read(self) -> str:
        log.debug(f"Reading contents of {self.source}")
        return read_text(self.source)

    def validate(self) -> str:
        """Read the source, checking it looks encrypted if it is about to be decrypted."""
        content = self.read()
        if self.mode is ProcessMode.DECRYPT:
            try:
                validate_encrypted(content)
            except EnvcException as error:
                raise FileOperationError(self.source, 'validate', error.message) from error
        return content

    def transform(self, content: str, cipher: Cipher) -> ProcessingResult:
        try:
            return process_file(content, cipher, self.mode)
        except EnvcException as error:
            raise FileOperationError(self.source, 'transform', error.message) from error

    def write(self, text: str) -> None:
        log.debug(f"Writing {self.target}")
        try:
            atomic_write(self.target, text)
        except OSError as error:
            raise FileOperationError(self.target, 'write', str(error)) from error

    def process(self, cipher: Cipher) -> ProcessingResult:
        """
        Read, transform and write a single file.

        The target is only written once the whole file has been transformed.
        """
        log.debug(f"Processing {self.source} to {self.target} ({self.mode})")
        result = self.transform(self.validate(), cipher)
        self.write(result.content)
        return result


@attr.s(frozen=True)
class Batch:
    files: typing.Sequence[EnvFile] = attr.ib(converter=tuple)
    directory: pathlib.Path = attr.ib(factory=pathlib.Path.cwd)

    @classmethod
    def scan(cls, directory: pathlib.Path, mode: ProcessMode) -> 'Batch':
        records = scan_directory(directory, mode)
        if not records:
            kind = '.env' if mode is ProcessMode.ENCRYPT else '.env.enc'
            raise NoCandidateFiles(f"No {kind} files found in {directory}")
        return cls([EnvFile.for_source(r.path, mode) for r in records], directory)

    def __iter__(self):
        return iter(self.files)

    def __len__(self):
        return len(self.files)

    def rel(self, path: pathlib.Path) -> str:
        return os.path.relpath(path.as_posix(), self.directory.as_posix())

    def existing_targets(self) -> typing.Sequence[pathlib.Path]:
        return tuple(f.target for f in self.files if f.target.exists())

    def validate(self) -> None:
        """Check every source can be read (and looks encrypted, when decrypting)."""
        for env_file in self:
            env_file.validate()

    def process(
            self,
            cipher: Cipher) -> typing.Iterator[typing.Tuple[EnvFile, ProcessingResult]]:
        """
        Process each file in turn, stopping at the first failure.

        Outputs written before a failure are kept.
        """
        log.info(f"Processing {len(self.files)} files")
        for env_file in self:
            log.info(f"Processing {self.rel(env_file.source)} to {self.rel(env_file.target)}")
            yield env_file, env_file.process(cipher)
        log.info(f"Processed {len(self.files)} files")
