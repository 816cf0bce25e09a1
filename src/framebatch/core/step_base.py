"""Pipeline step base: typed input, output and config around one ``run()``.

The runner builds every step from its YAML config, hands it a mapping of
input fields (YAML ``inputs``, CLI overrides, upstream outputs) and passes
the returned pydantic output on to the steps that depend on it.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, Generic, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from framebatch.exceptions import ConfigError, StepValidationError

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """One stage of a frame batch pipeline.

    ``output_root`` is the directory that receives one frames folder per
    video; steps that only produce item lists ignore it.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, output_root: Path):
        self.config = config
        self.output_root = Path(output_root)

    @property
    def label(self) -> str:
        return self.name or type(self).__name__

    @classmethod
    def required_inputs(cls) -> list[str]:
        """Input fields without a default."""
        return [field for field, info in cls.input_type.model_fields.items() if info.is_required()]

    @classmethod
    def schemas(cls) -> dict[str, dict]:
        return {
            "input": cls.input_type.model_json_schema(),
            "output": cls.output_type.model_json_schema(),
            "config": cls.config_type.model_json_schema(),
        }

    def build_input(self, data: Mapping[str, Any]) -> InputT:
        try:
            return self.input_type(**data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid input for step '{self.label}':\n{exc}") from exc

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        ...

    def validate_inputs(self, inputs: InputT) -> bool:
        """Preconditions that field validation cannot express (files on disk, tools)."""
        return True

    def execute(self, inputs: InputT | Mapping[str, Any]) -> OutputT:
        """Build the input if needed, check preconditions, then run and time the step.

        Raises:
            ConfigError: ``inputs`` is a mapping that does not fit ``input_type``.
            StepValidationError: ``validate_inputs`` rejected the input.
        """
        if not isinstance(inputs, BaseModel):
            inputs = self.build_input(inputs)
        if not self.validate_inputs(inputs):
            raise StepValidationError(f"[{self.label}] Input validation failed")

        logger.info(f"[{self.label}] Starting...")
        started = time.monotonic()
        output = self.run(inputs)
        logger.info(f"[{self.label}] Done in {time.monotonic() - started:.1f}s")
        return output
