"""
Exceptions raised by the comparison pipeline.
Each stage fails fast with its own type so callers can tell a bad upload
from a bad model reply from a failed write.
"""
from enum import Enum


class ComparisonError(Exception):
    """Base exception for comparison pipeline errors"""
    pass


class PreprocessError(ComparisonError):
    """Source image could not be read, decoded or resized"""
    pass


class UpstreamError(ComparisonError):
    """The vision model call failed or returned an unusable shape"""
    pass


class RenderError(ComparisonError):
    """Target image could not be decoded or the output could not be written"""
    pass


class ParseErrorKind(str, Enum):
    NO_JSON = "no_json"
    MALFORMED = "malformed"
    MISSING_KEY = "missing_key"


class ParseError(ComparisonError):
    """
    Model text did not carry the expected structured payload.

    `kind` tells apart a reply with no JSON at all (worth retrying), JSON
    that does not decode (abort) and decoded JSON lacking a required key.
    """

    kind: ParseErrorKind

    def __init__(self, message: str, kind: ParseErrorKind):
        super().__init__(message)
        self.kind = kind


class NoJSONFoundError(ParseError):
    def __init__(self, message: str = "No JSON found in model response"):
        super().__init__(message, ParseErrorKind.NO_JSON)


class MalformedJSONError(ParseError):
    def __init__(self, message: str):
        super().__init__(message, ParseErrorKind.MALFORMED)


class MissingKeyError(ParseError):
    def __init__(self, key: str):
        super().__init__(f"Required key '{key}' missing from model response", ParseErrorKind.MISSING_KEY)
        self.key = key
