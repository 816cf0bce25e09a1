"""Pipeline orchestrator: reads pipeline.yaml and executes steps in order."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, ValidationError

from framebatch.exceptions import ConfigError, InputNotFoundError
from .contracts import PipelineConfig, StepEntry

logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> dict:
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(f"Config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    try:
        return PipelineConfig(**_read_yaml(config_path))
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline config {config_path}:\n{exc}") from exc


def load_step_config(config_path: Path | None, config_class: type[BaseModel]) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model (defaults if None)."""
    raw = _read_yaml(config_path) if config_path is not None else {}
    try:
        return config_class(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid step config {config_path}:\n{exc}") from exc


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'framebatch.steps.s02_extract_frames'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def build_step(entry: StepEntry, output_root: Path, config_dir: Path | None = None):
    """Instantiate the step named by ``entry`` with its config file."""
    step_cls = import_step_class(entry.module)
    config_file = None
    if entry.config_file:
        config_file = Path(entry.config_file)
        if config_dir is not None and not config_file.is_absolute():
            config_file = config_dir / config_file
    step_config = load_step_config(config_file, step_cls.config_type)
    return step_cls(config=step_config, output_root=output_root)


def run_pipeline(
    config_path: Path,
    inputs: dict[str, dict[str, Any]] | None = None,
    configure_step: Callable[[StepEntry, Any], None] | None = None,
) -> dict[str, BaseModel]:
    """Execute the enabled steps of a pipeline config in order.

    Every enabled step is built before the first one runs, so a bad step
    config or an unusable capability (e.g. missing upload credentials) fails
    before any work is done. Each step's input is built from
    ``inputs[step_name]`` updated with the outputs of the steps it depends
    on. ``configure_step`` may adjust a step instance (e.g. attach a
    progress callback) before it runs.
    """
    config_path = Path(config_path)
    pipeline_cfg = load_pipeline_config(config_path)
    output_root = pipeline_cfg.output_dir
    results: dict[str, BaseModel] = {}

    enabled_steps = [s for s in pipeline_cfg.steps if s.enabled]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(enabled_steps)} steps")

    step_instances = [build_step(entry, output_root, config_dir=config_path.parent) for entry in enabled_steps]

    for entry, step_instance in zip(enabled_steps, step_instances):
        logger.info(f"--- Step: {entry.name} ---")
        if configure_step is not None:
            configure_step(entry, step_instance)

        input_data = dict(entry.inputs)
        input_data.update((inputs or {}).get(entry.name, {}))
        for dep in entry.depends_on:
            if dep in results:
                input_data.update(results[dep].model_dump())

        results[entry.name] = step_instance.execute(input_data)

    logger.info("Pipeline complete.")
    return results
