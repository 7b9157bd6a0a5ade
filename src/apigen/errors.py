"""Generator-time errors.

Any of these aborts the run: the generator never writes partial output.
"""


class GeneratorError(Exception):
    """Base class for every fatal generator failure."""

    def __init__(self, message: str, filename: str = "<source>", lineno: int | None = None):
        self.message = message
        self.filename = filename
        self.lineno = lineno
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.lineno is None:
            return f"{self.filename}: {self.message}"
        return f"{self.filename}:{self.lineno}: {self.message}"


class SourceError(GeneratorError):
    """The input module could not be parsed."""


class AnnotationError(GeneratorError):
    """A marker annotation payload could not be decoded."""


class SignatureError(GeneratorError):
    """A handler method has too few or untyped parameters."""


class FieldTypeError(GeneratorError):
    """A request field is neither str nor int."""


class TagValueError(GeneratorError):
    """A field tag directive carries an invalid value."""


class OutputError(GeneratorError):
    """The generated module is not valid Python."""


class ConfigError(GeneratorError):
    """The generator configuration file is malformed."""
