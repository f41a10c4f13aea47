"""
Model file parsing and validation.

This module loads HMM definitions from JSON files, validates them against a
schema and builds :class:`~silent_hmm.hmm.model.HMM` instances. Structural
problems (bad JSON, schema violations) raise ``ModelFormatError``; models that
parse but violate HMM invariants raise ``ModelConstructionError`` from the
model itself.
"""

import json
import jsonschema
from pathlib import Path
from typing import Dict, Any, Union

from ..exceptions import ModelFormatError
from ..hmm.model import HMM, State
from ..logger import get_logger

logger = get_logger(__name__)


PROBABILITY_SCHEMA = {"type": "number", "minimum": 0.0, "maximum": 1.0}

MODEL_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Model name (optional)"
        },
        "alphabet": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "uniqueItems": True,
            "description": "Emission alphabet; defaults to all emitted symbols"
        },
        "begin": {
            "type": "string",
            "minLength": 1,
            "description": "Id of the silent begin state"
        },
        "states": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "silent": {"type": "boolean", "default": False},
                    "emissions": {
                        "type": "object",
                        "additionalProperties": PROBABILITY_SCHEMA
                    }
                },
                "required": ["id"],
                "additionalProperties": False
            }
        },
        "transitions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "from": {"type": "string", "minLength": 1},
                    "to": {"type": "string", "minLength": 1},
                    "prob": PROBABILITY_SCHEMA
                },
                "required": ["from", "to", "prob"],
                "additionalProperties": False
            }
        }
    },
    "required": ["begin", "states", "transitions"],
    "additionalProperties": True
}


def validate_model_dict(data: Dict[str, Any]) -> None:
    """
    Validate a model definition against :data:`MODEL_SCHEMA`.

    Raises:
        ModelFormatError: If the definition does not match the schema
    """
    try:
        jsonschema.validate(data, MODEL_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ModelFormatError(f"Model validation failed at {location}: {e.message}")


def model_from_dict(data: Dict[str, Any]) -> HMM:
    """
    Build an HMM from a parsed model definition.

    Args:
        data: Dictionary in the model file format

    Returns:
        Validated HMM

    Raises:
        ModelFormatError: If the definition does not match the schema
        ModelConstructionError: If the model violates HMM invariants
    """
    validate_model_dict(data)

    states = [
        State(
            id=entry["id"],
            silent=entry.get("silent", False),
            emissions=entry.get("emissions", {})
        )
        for entry in data["states"]
    ]
    transitions = [(t["from"], t["to"], t["prob"]) for t in data["transitions"]]

    return HMM(
        states,
        transitions,
        begin_state=data["begin"],
        alphabet=data.get("alphabet"),
        name=data.get("name")
    )


def model_to_dict(model: HMM) -> Dict[str, Any]:
    """Convert an HMM to the model file format."""
    result: Dict[str, Any] = {}
    if model.name is not None:
        result["name"] = model.name

    result["alphabet"] = sorted(model.alphabet)
    result["begin"] = model.begin_state.id

    states = []
    for state in model.states:
        entry: Dict[str, Any] = {"id": state.id}
        if state.silent:
            entry["silent"] = True
        else:
            entry["emissions"] = dict(state.emissions)
        states.append(entry)
    result["states"] = states

    result["transitions"] = [
        {"from": src, "to": dst, "prob": prob}
        for (src, dst), prob in model.transitions.items()
    ]
    return result


def load_model(path: Union[str, Path]) -> HMM:
    """
    Load and validate an HMM from a JSON model file.

    Args:
        path: Path to JSON model file

    Returns:
        Validated HMM

    Raises:
        ModelFormatError: If the file cannot be read or fails schema validation
        ModelConstructionError: If the model violates HMM invariants
    """
    path = Path(path)
    if not path.exists():
        raise ModelFormatError(f"Model file not found: {path}")

    logger.debug(f"Loading model from: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ModelFormatError(f"Invalid JSON in model file {path}: {str(e)}")
    except OSError as e:
        raise ModelFormatError(f"Failed to read model file {path}: {str(e)}")

    if not isinstance(data, dict):
        raise ModelFormatError(f"Model file {path} must contain a JSON object")

    if "name" not in data:
        data["name"] = path.stem

    model = model_from_dict(data)
    logger.info(f"Loaded model {model.name!r} from {path} "
                f"({len(model)} states, {len(model.silent_order)} silent)")
    return model


def save_model(model: HMM, path: Union[str, Path]) -> Path:
    """Write an HMM to a JSON model file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(model_to_dict(model), f, indent=2, ensure_ascii=False)

    logger.info(f"Saved model {model.name!r} to {path}")
    return path
