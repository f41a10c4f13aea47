"""
Input/output module for model files, sequence files and model persistence.
"""

from .model_file import MODEL_SCHEMA, load_model, save_model, model_from_dict, model_to_dict, validate_model_dict
from .sequence import parse_sequence, read_sequences, validate_sequence
from .persistence import ModelPersistence

__all__ = [
    "MODEL_SCHEMA",
    "load_model",
    "save_model",
    "model_from_dict",
    "model_to_dict",
    "validate_model_dict",
    "parse_sequence",
    "read_sequences",
    "validate_sequence",
    "ModelPersistence"
]
