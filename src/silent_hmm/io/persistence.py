"""
Persistence of validated HMMs.

Models are serialized with joblib next to a JSON metadata file describing
their shape, so a validated model can be reloaded without re-parsing and
re-sorting its silent states.
"""

import json
import joblib
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import get_config
from ..exceptions import PersistenceError
from ..hmm.model import HMM
from ..logger import get_logger

logger = get_logger(__name__)


class ModelPersistence:
    """
    Saves and loads HMMs with their metadata in a models directory.

    Each model ``name`` is stored as ``<name>.pkl`` plus ``<name>_meta.json``.
    """

    def __init__(self, models_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            models_dir: Target directory (default from config ``persistence.models_dir``)
        """
        if models_dir is None:
            models_dir = get_config('persistence', 'models_dir') or 'models'
        self.models_dir = Path(models_dir)
        self.models_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"ModelPersistence initialized: {self.models_dir}")

    def _paths(self, name: str) -> Tuple[Path, Path]:
        safe_name = self._sanitize_filename(name)
        if not safe_name:
            raise PersistenceError(f"Invalid model name: {name!r}")
        return (self.models_dir / f"{safe_name}.pkl",
                self.models_dir / f"{safe_name}_meta.json")

    def save_model(self,
                   name: str,
                   model: HMM,
                   metadata: Optional[Dict[str, Any]] = None,
                   overwrite: bool = False) -> Tuple[str, str]:
        """
        Save a model and its metadata.

        Returns:
            Tuple of (model_path, metadata_path)

        Raises:
            PersistenceError: If saving fails or files exist without ``overwrite``
        """
        model_path, metadata_path = self._paths(name)

        if not overwrite:
            for path in (model_path, metadata_path):
                if path.exists():
                    raise PersistenceError(f"File already exists: {path}")

        full_metadata = dict(metadata or {})
        full_metadata.update({
            'saved_at': datetime.now().isoformat(),
            'model_file': model_path.name,
            'model_class': model.__class__.__name__,
            'model_name': model.name,
            'model_parameters': {
                'n_states': len(model),
                'n_silent': len(model.silent_order),
                'begin_state': model.begin_state.id,
                'alphabet': sorted(model.alphabet)
            }
        })

        try:
            logger.debug(f"Saving model to: {model_path}")
            joblib.dump(model, model_path, compress=get_config('persistence', 'compress') or 0)

            with open(metadata_path, 'w', encoding='utf-8') as f:
                json.dump(full_metadata, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to save model {name!r}: {str(e)}")

        logger.info(f"Saved model {name!r}: {model_path}")
        return str(model_path), str(metadata_path)

    def load_model(self, name: str) -> Tuple[HMM, Dict[str, Any]]:
        """
        Load a model and its metadata.

        Raises:
            PersistenceError: If files are missing, unreadable or inconsistent
        """
        model_path, metadata_path = self._paths(name)

        for path in (model_path, metadata_path):
            if not path.exists():
                raise PersistenceError(f"File not found: {path}")

        try:
            model = joblib.load(model_path)
            with open(metadata_path, 'r', encoding='utf-8') as f:
                metadata = json.load(f)
        except (OSError, EOFError, ValueError) as e:
            raise PersistenceError(f"Failed to load model {name!r}: {str(e)}")

        if not isinstance(model, HMM):
            raise PersistenceError(f"Loaded object is not an HMM: {type(model).__name__}")

        expected = metadata.get('model_parameters', {}).get('n_states')
        if expected != len(model):
            raise PersistenceError(
                f"Model n_states mismatch: metadata={expected}, model={len(model)}")

        logger.info(f"Loaded model {name!r} from {model_path}")
        return model, metadata

    def list_models(self) -> List[str]:
        """Names of all models that have both a model and a metadata file."""
        return sorted(
            path.stem for path in self.models_dir.glob("*.pkl")
            if (self.models_dir / f"{path.stem}_meta.json").exists()
        )

    @staticmethod
    def _sanitize_filename(name: str) -> str:
        safe_name = name.replace(' ', '_').replace('-', '_')
        return ''.join(c for c in safe_name if c.isalnum() or c == '_').lower()
