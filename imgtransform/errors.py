"""Error taxonomy for the transform pipeline.

Every failure surfaced by a transform is a ``TransformError`` with one of
four kinds:

NULL_INPUT          the image or the options are missing
INCOMPATIBLE_IMAGE  dimensions / channel count outside what is supported
INVALID_PARAMETER   an option outside its valid domain
ALGORITHM_FAILURE   the numeric routine failed or produced no result

``TransformResult`` carries either an image or one of these errors, for
callers that skip failed frames instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .image import Image


class ErrorKind(Enum):
    NULL_INPUT = "null input"
    INCOMPATIBLE_IMAGE = "incompatible image"
    INVALID_PARAMETER = "invalid parameter"
    ALGORITHM_FAILURE = "algorithm failure"


class TransformError(Exception):
    """Base class for all transform failures."""

    kind: ErrorKind = ErrorKind.ALGORITHM_FAILURE

    def __init__(self, message: str, transform_name: str | None = None, step: str | None = None):
        self.message = message
        self.transform_name = transform_name
        self.step = step
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        parts = [self.message] if self.message else []
        if self.transform_name:
            parts.append(f"[Transform: {self.transform_name}]")
        if self.step:
            parts.append(f"[Context: {self.step}]")
        return " ".join(parts)


class NullInputError(TransformError):
    kind = ErrorKind.NULL_INPUT


class IncompatibleImageError(TransformError):
    kind = ErrorKind.INCOMPATIBLE_IMAGE

    def __init__(self, description: str, reason: str, transform_name: str | None = None,
                 step: str | None = "Image compatibility check"):
        self.description = description
        self.reason = reason
        super().__init__(f"Image incompatibility: {description} - {reason}", transform_name, step)


class InvalidParameterError(TransformError):
    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, parameter: str, value: object, reason: str, transform_name: str | None = None,
                 step: str | None = "Parameter validation"):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid parameter '{parameter}' with value '{value}': {reason}",
                         transform_name, step)


class AlgorithmFailureError(TransformError):
    kind = ErrorKind.ALGORITHM_FAILURE


@dataclass(frozen=True)
class TransformResult:
    """Either a transformed image or the error that prevented it."""
    image: Image | None = None
    error: TransformError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Image:
        """Return the image, re-raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.image
