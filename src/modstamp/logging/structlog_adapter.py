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
"""StructlogAdapter: default LoggingPort implementation using structlog.

modstamp modules log through the standard library (``logging.getLogger``).
The adapter installs a root handler whose formatter runs those records
through structlog, so they pick up context bound around a save
(``collection`` and ``document_id``) and the stamp fields passed as
``extra`` (``decision`` and ``date_path``).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from modstamp.core.config import Config

#: ``extra`` keys of module log records copied into the structured event.
RECORD_FIELDS = ("decision", "date_path", "watched")


@contextmanager
def bound_document(collection: str, document_id: Any) -> Iterator[None]:
    """Bind the document being persisted to every record logged inside the block."""
    with structlog.contextvars.bound_contextvars(collection=collection, document_id=str(document_id)):
        yield


class StructlogAdapter:
    """Logging adapter backed by structlog.

    Reads ``modstamp.logging.level`` (``root`` plus per-module levels) and
    ``modstamp.logging.format`` (``console`` or ``json``).
    """

    def __init__(self, stream: Any = None) -> None:
        self._stream = stream
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        level_section = dict(config.get_section("modstamp.logging.level"))
        self._root_level = str(level_section.pop("root", "INFO")).upper()
        self._module_levels = {k: str(v).upper() for k, v in level_section.items()}
        self._format = str(config.get("modstamp.logging.format", "console")).lower()

        self._setup_structlog()
        for module, level in self._module_levels.items():
            self.set_level(module, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        log_level = getattr(logging, level.upper(), logging.INFO)
        logging.getLogger(name).setLevel(log_level)

    def _shared_processors(self) -> list[structlog.types.Processor]:
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(allow=RECORD_FIELDS),
            structlog.processors.TimeStamper(fmt="iso"),
        ]

    def _renderer(self) -> structlog.types.Processor:
        if self._format == "json":
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer()

    def _setup_structlog(self) -> None:
        log_level = getattr(logging, self._root_level, logging.INFO)
        shared = self._shared_processors()

        structlog.configure(
            processors=[
                *shared,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.UnicodeDecoder(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, self._renderer()],
            )
        )
        logging.basicConfig(handlers=[handler], level=log_level, force=True)
