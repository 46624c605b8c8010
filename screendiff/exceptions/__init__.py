# Custom exceptions package
from screendiff.exceptions.pipeline import (
    ComparisonError,
    PreprocessError,
    ParseError,
    ParseErrorKind,
    NoJSONFoundError,
    MalformedJSONError,
    MissingKeyError,
    RenderError,
    UpstreamError,
)
from screendiff.exceptions.base import (
    BaseErrorCode,
    DBErrorCode,
    EnumException,
    GenericSchemaException,
)

__all__ = [
    'ComparisonError',
    'PreprocessError',
    'ParseError',
    'ParseErrorKind',
    'NoJSONFoundError',
    'MalformedJSONError',
    'MissingKeyError',
    'RenderError',
    'UpstreamError',
    'BaseErrorCode',
    'DBErrorCode',
    'EnumException',
    'GenericSchemaException',
]
