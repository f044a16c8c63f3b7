"""Exceptions raised while loading and running corpora.

Every error carries an optional `ErrorContext`. When rendered, the
message is followed by the location of the failure (file position,
suite unit and test case) and a snippet: either the YAML source around
a parse failure or a YAML dump of the offending element.
"""

from collections.abc import Mapping
from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from pydantic import BaseModel
from yaml import safe_dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError

UNKNOWN_SOURCE = '<string>'
UNSERIALIZABLE = '<object>'

LOCATION_INDENT = 4
SNIPPET_INDENT = 8
YAML_INDENT = 2

SCALARS = (str, bytes, int, float, bool)


class ErrorContext(TypedDict, total=False):
    """Where an error happened and what it was about.

    Every key is optional.
    """

    #: Source file.
    filename: str | None
    #: Zero-based line in the source file.
    line_num: int | None
    #: Zero-based column in the source file.
    column_num: int | None

    #: Suite unit label (`describe`).
    unit: str | None
    #: Test case name (`it`).
    case: str | None

    #: Exception being reported.
    error: Exception | None
    #: Element the error is about.
    element: Any


def to_plain(value: Any) -> Any:  # noqa: ANN401
    """Reduce a value to data YAML can dump.

    Models are dumped in their document form; objects that are neither
    scalars nor containers are replaced by a placeholder.
    """
    if value is None or isinstance(value, SCALARS):
        return value

    if isinstance(value, BaseModel):
        value = value.model_dump(mode='json', by_alias=True, exclude_none=True)

    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}

    if isinstance(value, (list, tuple, set)):
        return [to_plain(item) for item in value]

    return UNSERIALIZABLE


def indent_lines(text: str, indent: int) -> list[str]:
    """Split text into indented, non-blank lines."""
    prefix = ' ' * indent

    return [f'{prefix}{line}' for line in text.splitlines() if line.strip()]


class ErrorFormatter:
    """Renders messages followed by their location and a snippet."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Render a message with its context.

        Args:
            message: Human-readable message.
            context: Location and data of the failure.

        Returns:
            The message alone without context, otherwise the message
            followed by location and snippet lines.
        """
        if not context:
            return message

        return linesep.join((
            message,
            *cls.location_lines(context),
            *cls.snippet_lines(context),
        ))

    @staticmethod
    def location_lines(context: ErrorContext) -> list[str]:
        """Describe the file position and the test of a failure."""
        prefix = ' ' * LOCATION_INDENT

        position = f'in "{context.get('filename') or UNKNOWN_SOURCE}"'
        if (line_num := context.get('line_num')) is not None:
            position += f', line {line_num + 1}'
            if (column_num := context.get('column_num')) is not None:
                position += f', column {column_num + 1}'

        lines = [f'{prefix}{position}']

        if (unit := context.get('unit')) is not None:
            test = f'in suite {unit!r}'
            if (case := context.get('case')) is not None:
                test += f', test {case!r}'
            lines.append(f'{prefix}{test}')

        return lines

    @staticmethod
    def snippet_lines(context: ErrorContext) -> list[str]:
        """Show the source of a YAML failure, or the element at fault."""
        error = context.get('error')
        if isinstance(error, MarkedYAMLError) and error.problem_mark is not None:
            return indent_lines(error.problem_mark.get_snippet(indent=0) or '', SNIPPET_INDENT)

        if (element := context.get('element')) is None:
            return []

        dumped = safe_dump(
            to_plain(element),
            indent=YAML_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return [f'{" " * SNIPPET_INDENT} ...', *indent_lines(dumped, SNIPPET_INDENT)]


class CSLError(Exception, ErrorFormatter):
    """Base class of all pytest-csl errors."""

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable description.
            context: Location and data of the failure.
        """
        super().__init__(message)

        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.format(self.message, self.context)


class ConfigurationError(CSLError):
    """A corpus cannot be set up.

    Covers a missing or empty style, an empty or invalid library file,
    suite patterns matching no files and unknown rendering engines.
    """


class ParseError(CSLError):
    """A suite, library or configuration document is malformed."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Report a YAML syntax error at its position."""
        context = ErrorContext(error=error)
        if (mark := error.problem_mark or error.context_mark) is not None:
            context.update(filename=mark.name, line_num=mark.line, column_num=mark.column)

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{" " * LOCATION_INDENT}{error.problem}'

        return cls(message, context=context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None) -> 'Self':
        """Report a validation failure on the smallest failing fragment.

        The first error whose path can be followed into `data` gives
        the message; the snippet shows the fragment it points at.

        Args:
            error: Validation error raised by pydantic.
            data: Document data that failed validation.
            filename: Source file of the document.

        Returns:
            ParseError pointing at the failing fragment.
        """
        context = ErrorContext(filename=filename, error=error, element=data)

        if not isinstance(data, (dict, list)) or not data:
            return cls('Type validation error', context=context)

        for details in error.errors(include_url=False, include_input=False):
            message = next((line.strip() for line in details['msg'].splitlines() if line.strip()), '')
            if message:
                context['element'] = fragment(data, details['loc'])
                return cls(message, context=context)

        return cls('Validation error', context=context)


def fragment(data: Any, loc: 'Sequence[int | str]') -> Any:  # noqa: ANN401
    """Cut the fragment of a document a validation error points at.

    The path is followed as far as it exists in `data`; steps that do
    not exist there, such as union member tags, end the walk. The
    result keeps the last key, or wraps the last list member, so the
    fragment reads as part of its document.

    Args:
        data: Validated document data.
        loc: Error location reported by pydantic.

    Returns:
        The fragment, or the whole document if the path does not enter it.
    """
    parent: Any = None
    key: int | str | None = None
    value = data

    for step in loc:
        if not isinstance(value, (dict, list)):
            break

        try:
            child = value[step]
        except (KeyError, IndexError, TypeError):
            break

        parent, key, value = value, step, child

    if parent is None:
        return data

    if isinstance(parent, list):
        return [value]

    return {key: value}


class NetworkError(CSLError):
    """A reference repository cannot be obtained.

    Raised only after the fallback fresh clone has failed as well.
    """


class RenderError(CSLError):
    """The rendering engine failed on a test case.

    Fails a single test and never aborts the remaining corpus.
    """

    @classmethod
    def from_case(cls, message: str, *,
                  element: Any = None,  # noqa: ANN401
                  filename: str | None = None,
                  unit: str | None = None,
                  case: str | None = None) -> 'Self':
        """Report a rendering failure of a test case.

        Args:
            message: Description of the underlying failure.
            element: The rendered input.
            filename: Corpus configuration file.
            unit: Suite unit label.
            case: Test case name.

        Returns:
            RenderError with the test location attached.
        """
        return cls(
            f'Rendering error{linesep}{" " * LOCATION_INDENT}{message}',
            context=ErrorContext(filename=filename, unit=unit, case=case, element=element),
        )
