import pathlib

import click


class EnvcException(click.ClickException):
    pass


class CipherError(EnvcException):
    pass


class DecryptionError(CipherError):
    def __init__(self):
        super().__init__("Wrong password or invalid encrypted data")


class ValidationError(EnvcException):
    pass


class NoCandidateFiles(EnvcException):
    pass


class OperationCancelled(EnvcException):
    def __init__(self):
        super().__init__("Operation cancelled")


class SetEnvError(EnvcException):
    pass


class FileOperationError(EnvcException):
    """A read, validate, transform or write step failed for one file."""

    def __init__(self, path: pathlib.Path, stage: str, reason: str):
        self.path = path
        self.stage = stage
        self.reason = reason
        super().__init__(f"Failed to {stage} {path}: {reason}")
