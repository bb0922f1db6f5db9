# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Exception hierarchy for modstamp.

All library exceptions inherit from ModStampException, so callers can catch
the base class or a specific subclass.

Categories:
- ValidationException: a pending save was rejected by field validation, or
  a document value was addressed through an undefined path
- ConfigurationException: a schema or plugin could not be set up
"""

from __future__ import annotations

from collections.abc import Iterable

from modstamp.kernel.types import FieldError


class ModStampException(Exception):
    """Base exception for all modstamp errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "VALIDATION_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ValidationException(ModStampException):
    """Validation failures."""


class ConfigurationException(ModStampException):
    """Schema definition or plugin configuration failures."""


class PersistenceException(ModStampException):
    """The document store rejected a write or lookup."""


class SchemaDefinitionError(ConfigurationException):
    """A path could not be registered on a schema."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Cannot define path `{path}`: {reason}",
            code="SCHEMA_001",
            context={"path": path},
        )
        self.path = path


class DocumentValidationError(ValidationException):
    """A document failed validation; nothing was written.

    ``errors`` maps each offending path to its message, one entry per path.
    """

    def __init__(self, field_errors: Iterable[FieldError], model: str | None = None) -> None:
        self.field_errors: list[FieldError] = list(field_errors)
        self.errors: dict[str, str] = {fe.field: fe.message for fe in self.field_errors}
        name = model or "Document"
        detail = ", ".join(f"{path}: {message}" for path, message in self.errors.items())
        super().__init__(
            f"{name} validation failed: {detail}",
            code="VALIDATION_001",
            context={"model": name, "paths": list(self.errors)},
        )


class UndefinedPathError(ValidationException):
    """A document value was addressed through a path its schema does not define."""

    def __init__(self, path: str, model: str | None = None, reason: str | None = None) -> None:
        name = model or "Document"
        message = f"Path `{path}` is not defined on schema '{name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, code="VALIDATION_002", context={"model": name, "path": path})
        self.path = path
