"""
Game configuration loader for the Banker's Algorithm game engine.

Loads and validates JSON game configurations. A configuration declares the
resource types, the processes with their maximum demands and optional
initial allocations, and (for the command-line player) a list of scripted
actions.
"""

import json
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from models.errors import ConfigurationError
from models.process import Process
from models.resource import ResourceType
from models.system_state import SystemState
from utils.vectors import MAX_COUNT

ACTION_TYPES = ('request', 'release', 'check', 'reset', 'complete')


@dataclass(frozen=True)
class GameConfig:
    """
    Validated, immutable parameters of a game session.

    Kept by the allocation engine so that reset() can rebuild the
    starting state exactly.
    """
    resources: Tuple[ResourceType, ...]
    processes: Tuple[Process, ...]
    initial_allocation: Tuple[Tuple[int, ...], ...]
    description: str = ""

    @classmethod
    def from_vectors(
        cls,
        resource_names: Sequence[str],
        totals: Sequence[int],
        process_names: Sequence[str],
        max_demands: Sequence[Sequence[int]],
        initial_allocations: Optional[Sequence[Sequence[int]]] = None,
        description: str = ""
    ) -> "GameConfig":
        """
        Build a configuration from parallel name/value sequences.

        Raises:
            ConfigurationError: On dimension mismatch, negative values, an
                allocation above max demand, a max demand above the resource
                total, or allocations summing above a resource total
        """
        resource_names = [str(name) for name in _as_list(resource_names, "resource_names")]
        totals = _as_list(totals, "totals")
        process_names = [str(name) for name in _as_list(process_names, "process_names")]
        max_demands = _as_list(max_demands, "max_demands")

        if len(resource_names) != len(totals):
            raise ConfigurationError(
                f"{len(resource_names)} resource names but {len(totals)} totals"
            )
        if len(set(resource_names)) != len(resource_names):
            raise ConfigurationError("Resource names must be unique")
        if len(process_names) != len(max_demands):
            raise ConfigurationError(
                f"{len(process_names)} process names but {len(max_demands)} max demand rows"
            )
        if len(set(process_names)) != len(process_names):
            raise ConfigurationError("Process names must be unique")

        resources = tuple(
            ResourceType(index=j, name=name, total=total)
            for j, (name, total) in enumerate(zip(resource_names, totals))
        )
        num_resources = len(resources)

        if initial_allocations is None:
            initial_allocations = [[0] * num_resources for _ in process_names]
        initial_allocations = _as_list(initial_allocations, "initial_allocations")
        if len(initial_allocations) != len(process_names):
            raise ConfigurationError(
                f"{len(initial_allocations)} initial allocation rows for "
                f"{len(process_names)} processes"
            )

        processes = []
        for i, name in enumerate(process_names):
            max_demand = _validate_row(max_demands[i], num_resources, f"Process {name}: max_demand")
            allocation = _validate_row(
                initial_allocations[i], num_resources, f"Process {name}: initial_allocation"
            )
            process = Process(index=i, name=name, max_demand=tuple(max_demand))

            for j, resource in enumerate(resources):
                if max_demand[j] > resource.total:
                    raise ConfigurationError(
                        f"Process {name}: max_demand[{j}] ({max_demand[j]}) "
                        f"exceeds total {resource.name} instances ({resource.total})"
                    )
                if not process.can_hold(j, allocation[j]):
                    raise ConfigurationError(
                        f"Process {name}: initial_allocation[{j}] ({allocation[j]}) "
                        f"exceeds max_demand[{j}] ({max_demand[j]})"
                    )

            processes.append(process)
            initial_allocations[i] = allocation

        _validate_initial_allocations(initial_allocations, resources)

        return cls(
            resources=resources,
            processes=tuple(processes),
            initial_allocation=tuple(tuple(row) for row in initial_allocations),
            description=description
        )

    @property
    def num_processes(self) -> int:
        return len(self.processes)

    @property
    def num_resources(self) -> int:
        return len(self.resources)

    def build_state(self) -> SystemState:
        """Create the starting snapshot for a session."""
        allocation = [list(row) for row in self.initial_allocation]
        if not allocation:
            allocation = [[] for _ in self.processes]
        return SystemState.initial(self.resources, self.processes, allocation)


def _as_list(values: Any, label: str) -> List:
    if isinstance(values, (str, bytes, dict)):
        raise ConfigurationError(f"{label} must be a list, got {values!r}")
    try:
        return list(values)
    except TypeError:
        raise ConfigurationError(f"{label} must be a list, got {values!r}")


def _validate_row(row: Any, num_resources: int, label: str) -> List[int]:
    """Check a per-resource row: right length, non-negative integers."""
    if not isinstance(row, (list, tuple, np.ndarray)) or np.ndim(row) != 1:
        raise ConfigurationError(f"{label} must be a list")
    if len(row) != num_resources:
        raise ConfigurationError(
            f"{label} length ({len(row)}) does not match resource count ({num_resources})"
        )
    for j, value in enumerate(row):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigurationError(f"{label}[{j}] must be an integer, got {value!r}")
        if value < 0:
            raise ConfigurationError(f"{label}[{j}] cannot be negative ({value})")
        if value > MAX_COUNT:
            raise ConfigurationError(f"{label}[{j}] is too large ({value})")
    return [int(value) for value in row]


def _validate_initial_allocations(
    allocations: List[List[int]],
    resources: Tuple[ResourceType, ...]
) -> None:
    """
    Validate that initial allocations don't exceed resource totals.

    Critical validation: For each resource r, sum(allocation[:,r]) <= total[r]

    Raises:
        ConfigurationError: If initial allocations are invalid
    """
    for j, resource in enumerate(resources):
        allocated = sum(row[j] for row in allocations)
        if allocated > resource.total:
            raise ConfigurationError(
                f"Resource {resource.name} initial allocations ({allocated}) "
                f"exceed total instances ({resource.total})"
            )


def parse_game_config(data: Dict) -> GameConfig:
    """
    Build a GameConfig from a configuration dictionary.

    Args:
        data: Dictionary with 'resources' and 'processes' lists

    Returns:
        Validated GameConfig

    Raises:
        ConfigurationError: If required fields are missing or invalid
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Game configuration must be a JSON object")
    if 'resources' not in data:
        raise ConfigurationError("Configuration missing 'resources' field")
    if 'processes' not in data:
        raise ConfigurationError("Configuration missing 'processes' field")

    for field in ('resources', 'processes'):
        if not isinstance(data[field], list):
            raise ConfigurationError(f"Configuration field '{field}' must be a list")

    resource_names, totals = [], []
    for j, res in enumerate(data['resources']):
        if not isinstance(res, dict):
            raise ConfigurationError(f"Resource #{j} must be an object")
        if 'total' not in res:
            raise ConfigurationError(f"Resource #{j} missing 'total'")
        resource_names.append(res.get('name', chr(ord('A') + j) if j < 26 else f"R{j}"))
        totals.append(res['total'])

    process_names, max_demands, allocations = [], [], []
    for i, proc in enumerate(data['processes']):
        if not isinstance(proc, dict):
            raise ConfigurationError(f"Process #{i} must be an object")
        if 'max_demand' not in proc:
            raise ConfigurationError(f"Process #{i} missing required field: max_demand")
        process_names.append(proc.get('name', f"P{i}"))
        max_demands.append(proc['max_demand'])
        allocations.append(proc.get('initial_allocation', [0] * len(totals)))

    return GameConfig.from_vectors(
        resource_names,
        totals,
        process_names,
        max_demands,
        allocations,
        description=data.get('description', '')
    )


def load_game_config(file_path: str) -> Tuple[GameConfig, List[Dict]]:
    """
    Load a game configuration from a JSON file.

    Args:
        file_path: Path to configuration JSON file

    Returns:
        Tuple of (GameConfig, scripted actions)

    Raises:
        ConfigurationError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file: {e}")

    config = parse_game_config(data)
    actions = data.get('actions', [])
    if not isinstance(actions, list):
        raise ConfigurationError("Configuration field 'actions' must be a list")
    actions = [_validate_action(action, config) for action in actions]
    return config, actions


def _validate_action(action: Dict, config: GameConfig) -> Dict:
    """
    Validate one scripted action.

    Raises:
        ConfigurationError: If action is invalid
    """
    if not isinstance(action, dict):
        raise ConfigurationError(f"Action must be an object, got {action!r}")
    if 'type' not in action:
        raise ConfigurationError("Action missing 'type' field")

    action_type = action['type']
    if action_type not in ACTION_TYPES:
        raise ConfigurationError(f"Unknown action type '{action_type}'")

    if action_type in ('request', 'release'):
        if 'process' not in action:
            raise ConfigurationError(f"{action_type} action missing 'process'")
    if action_type == 'request' and 'request' not in action:
        raise ConfigurationError("request action missing 'request' vector")

    return action


# Classic five-process, three-resource instance (Silberschatz, Ch. 7.5.3)
DEFAULT_CONFIG_DATA = {
    'description': "Round 2: keep the system safe while every process completes",
    'resources': [
        {'name': 'A', 'total': 10},
        {'name': 'B', 'total': 5},
        {'name': 'C', 'total': 7},
    ],
    'processes': [
        {'name': 'P0', 'max_demand': [7, 5, 3], 'initial_allocation': [0, 1, 0]},
        {'name': 'P1', 'max_demand': [3, 2, 2], 'initial_allocation': [2, 0, 0]},
        {'name': 'P2', 'max_demand': [9, 0, 2], 'initial_allocation': [3, 0, 2]},
        {'name': 'P3', 'max_demand': [2, 2, 2], 'initial_allocation': [2, 1, 1]},
        {'name': 'P4', 'max_demand': [4, 3, 3], 'initial_allocation': [0, 0, 2]},
    ],
}

DEFAULT_GAME_CONFIG = parse_game_config(DEFAULT_CONFIG_DATA)
