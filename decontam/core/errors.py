"""decontam error hierarchy.

Every failure kind is fatal to the run; ``decontam.__main__`` catches
``DecontamError`` at the top level and exits non-zero.

    DecontamError
    ├── InputOutputError      file or directory unreadable / unwritable
    ├── ParseError            training line is not a JSON object with a string "text"
    ├── SuffixIndexError      index or boundary object unloadable, query out of range
    ├── SerializationError    persisted artifact cannot be encoded / decoded
    └── ConfigError           invalid combination of run parameters
"""


class DecontamError(Exception):
    """Base class for all decontam errors."""


class InputOutputError(DecontamError):
    """A file or directory could not be read or written."""


class ParseError(DecontamError):
    """A training line could not be parsed."""

    def __init__(self, path: str, line_num: int, reason: str):
        self.path = path
        self.line_num = line_num
        self.reason = reason
        super().__init__(f"{path}:{line_num}: {reason}")

    def __reduce__(self):
        # Re-raised in the parent process when a pool worker fails
        return (self.__class__, (self.path, self.line_num, self.reason))


class SuffixIndexError(DecontamError):
    """The suffix-array index or boundary object is unusable."""


class SerializationError(DecontamError):
    """A persisted artifact is corrupt or has an unexpected layout."""


class ConfigError(DecontamError):
    """Run parameters are missing or invalid."""
