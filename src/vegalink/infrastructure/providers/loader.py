from __future__ import annotations

import importlib.util
import traceback
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from vegalink.domain.exceptions import ProviderLoadError, ProviderValidationError
from vegalink.domain.ports.provider import StreamProviderPort
from vegalink.infrastructure.providers.link_list import (
    LinkListDefinition,
    LinkListProvider,
)

log = structlog.get_logger(__name__)


def load_yaml_provider(path: Path) -> LinkListProvider:
    """Load and validate a YAML link-list provider."""
    try:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
        if data is None:
            raise ProviderValidationError("YAML file is empty")
        if not isinstance(data, dict):
            raise ProviderValidationError("YAML root must be a mapping/object")

        definition = LinkListDefinition.model_validate(data)
        return LinkListProvider.from_definition(definition)
    except ProviderValidationError as e:
        log.error(
            "provider_validation_failed",
            provider_file=str(path),
            provider_type="yaml",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise
    except (OSError, UnicodeDecodeError) as e:
        log.error(
            "provider_load_failed",
            provider_file=str(path),
            provider_type="yaml",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise ProviderLoadError(str(e)) from e
    except ValidationError as e:
        log.error(
            "provider_validation_failed",
            provider_file=str(path),
            provider_type="yaml",
            error_type="ValidationError",
            error_details=e.errors(),
        )
        raise ProviderValidationError(str(e)) from e
    except yaml.YAMLError as e:
        log.error(
            "provider_validation_failed",
            provider_file=str(path),
            provider_type="yaml",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise ProviderValidationError(str(e)) from e


def _import_module_from_path(path: Path) -> ModuleType:
    module_name = f"vegalink_dynamic_provider_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise ProviderLoadError(f"Could not create import spec for {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except SyntaxError as e:
        tb = traceback.format_exc()
        raise ProviderLoadError(f"SyntaxError while importing {path}:\n{tb}") from e
    except Exception as e:
        tb = traceback.format_exc()
        raise ProviderLoadError(f"Error while importing {path}:\n{tb}") from e

    return module


def load_python_provider(path: Path) -> StreamProviderPort:
    """Import a Python provider file exporting a module-level ``provider``."""
    try:
        module = _import_module_from_path(path)
        if not hasattr(module, "provider"):
            raise ProviderLoadError("Provider file must export 'provider' variable")

        provider: Any = getattr(module, "provider")
        if not callable(getattr(provider, "get_streams", None)):
            raise ProviderLoadError("Provider must have 'get_streams' method")
        for attr in ("name", "value"):
            field = getattr(provider, attr, None)
            if not isinstance(field, str) or not field:
                raise ProviderLoadError(f"Provider must have non-empty '{attr}' attribute")

        return provider
    except ProviderLoadError as e:
        log.error(
            "provider_load_failed",
            provider_file=str(path),
            provider_type="python",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise
