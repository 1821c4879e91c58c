"""
YAML loader for strategy definitions.

Loads and saves StrategyDefinitions as YAML files, allowing easy sharing
and modification of strategies without code changes.
"""
from pathlib import Path
from typing import Union

import yaml

from .definition import StrategyDefinition
from ..shared.errors import InvalidParametersError


def load_strategy_from_yaml(yaml_path: Union[str, Path]) -> StrategyDefinition:
    """
    Load a strategy definition from a YAML file.

    Args:
        yaml_path: Path to YAML strategy file

    Returns:
        StrategyDefinition

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        InvalidParametersError: If YAML is empty or missing required sections
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Strategy file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise InvalidParametersError(f"Empty strategy file: {yaml_path}")

    config_dict.setdefault('id', yaml_path.stem)
    config_dict.setdefault('name', yaml_path.stem)
    return StrategyDefinition.from_dict(config_dict)


def save_strategy_to_yaml(definition: StrategyDefinition, yaml_path: Union[str, Path]) -> None:
    """Save a strategy definition to a YAML file (same layout load_strategy_from_yaml reads)."""
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, 'w') as f:
        yaml.dump(definition.to_dict(), f, default_flow_style=False, sort_keys=False)
