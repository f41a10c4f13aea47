"""
Tests for JSON model file loading, saving and schema validation.
"""

import json
import math

import pytest

from silent_hmm.exceptions import ModelConstructionError, ModelFormatError
from silent_hmm.hmm.forward import score
from silent_hmm.io.model_file import (
    load_model, model_from_dict, model_to_dict, save_model, validate_model_dict
)


class TestModelFromDict:
    """Test building models from parsed definitions."""

    def test_valid_definition(self, model_definition):
        model = model_from_dict(model_definition)
        assert model.name == "ab"
        assert model.begin_state.id == "B"
        assert [s.id for s in model.emitting_states] == ["S1", "S2"]
        assert model.transition_prob("S1", "S2") == 0.4
        assert score(model, "ab") == pytest.approx(math.log(0.1))

    def test_missing_required_field(self, model_definition):
        del model_definition["begin"]
        with pytest.raises(ModelFormatError, match="'begin' is a required property"):
            model_from_dict(model_definition)

    def test_probability_out_of_range(self, model_definition):
        model_definition["transitions"][0]["prob"] = 1.5
        with pytest.raises(ModelFormatError, match="transitions/0/prob"):
            model_from_dict(model_definition)

    def test_unexpected_state_field(self, model_definition):
        model_definition["states"][0]["color"] = "red"
        with pytest.raises(ModelFormatError):
            validate_model_dict(model_definition)

    def test_cycle_is_construction_error(self, model_definition):
        model_definition["states"].append({"id": "M1", "silent": True})
        model_definition["states"].append({"id": "M2", "silent": True})
        model_definition["transitions"] += [
            {"from": "S1", "to": "M1", "prob": 0.0},
            {"from": "M1", "to": "M2", "prob": 1.0},
            {"from": "M2", "to": "M1", "prob": 1.0}
        ]
        with pytest.raises(ModelConstructionError, match="cycle"):
            model_from_dict(model_definition)

    def test_alphabet_optional(self, model_definition):
        del model_definition["alphabet"]
        model = model_from_dict(model_definition)
        assert model.alphabet == frozenset({"a", "b"})

    def test_to_dict_round_trip_scores_match(self, two_state_model):
        rebuilt = model_from_dict(model_to_dict(two_state_model))
        for sequence in ["a", "ab", "bba", "abab"]:
            assert score(rebuilt, sequence) == score(two_state_model, sequence)
        assert [s.id for s in rebuilt.silent_order] == ["B"]


class TestModelFiles:
    """Test reading and writing model files."""

    def test_load_model(self, model_file):
        model = load_model(model_file)
        assert model.name == "ab"
        assert len(model) == 3

    def test_name_defaults_to_file_stem(self, temp_dir, model_definition):
        del model_definition["name"]
        path = temp_dir / "unnamed_model.json"
        path.write_text(json.dumps(model_definition))
        assert load_model(path).name == "unnamed_model"

    def test_missing_file(self, temp_dir):
        with pytest.raises(ModelFormatError, match="not found"):
            load_model(temp_dir / "missing.json")

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(ModelFormatError, match="Invalid JSON"):
            load_model(path)

    def test_non_object_json(self, temp_dir):
        path = temp_dir / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ModelFormatError, match="JSON object"):
            load_model(path)

    def test_save_and_reload(self, temp_dir, passthrough_models):
        _, model = passthrough_models
        path = save_model(model, temp_dir / "nested" / "passthrough.json")
        assert path.exists()

        reloaded = load_model(path)
        assert reloaded.name == "passthrough"
        assert [s.id for s in reloaded.silent_order] == ["B", "M"]
        assert score(reloaded, "abba") == pytest.approx(score(model, "abba"))
