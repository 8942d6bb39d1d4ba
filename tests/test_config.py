"""
Collision term configuration: defaults, parsing and YAML loading.
"""

import pytest

from hadronx.config import CollisionConfig, IncludedReactions, NNbarTreatment
from hadronx.errors import ConfigurationError


def test_defaults():
    config = CollisionConfig()
    assert config.elastic_parameter < 0
    assert config.two_to_one
    assert config.included_2to2 == IncludedReactions.ALL
    assert config.low_snn_cut == 1.98
    assert config.strings
    assert config.nnbar_treatment == NNbarTreatment.NO_ANNIHILATION
    assert not config.isotropic
    assert config.string_formation_time == 1.0


@pytest.mark.parametrize("value,expected", [
    ("All", IncludedReactions.ALL),
    ("elastic", IncludedReactions.ELASTIC),
    (["Elastic", "NN_to_NR"], IncludedReactions.ALL),
    ([], IncludedReactions.NONE),
    (IncludedReactions.NN_TO_NR, IncludedReactions.NN_TO_NR),
])
def test_included_reactions_parse(value, expected):
    assert IncludedReactions.parse(value) == expected


def test_unknown_reaction_family():
    with pytest.raises(ConfigurationError):
        CollisionConfig(included_2to2=["Elastic", "KN_to_KDelta"])


def test_nnbar_treatment_from_string():
    assert CollisionConfig(nnbar_treatment="Resonances").nnbar_treatment == NNbarTreatment.RESONANCES
    with pytest.raises(ConfigurationError):
        CollisionConfig(nnbar_treatment="annihilate everything")


@pytest.mark.parametrize("field", ["low_snn_cut", "string_formation_time"])
def test_negative_values_rejected(field):
    with pytest.raises(ConfigurationError):
        CollisionConfig(**{field: -0.1})


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigurationError, match="Sigma"):
        CollisionConfig.from_dict({"Sigma": 10.0})


def test_from_yaml_section(tmp_path):
    path = tmp_path / "collision.yaml"
    path.write_text(
        "Collision_Term:\n"
        "  elastic_parameter: 12.5\n"
        "  included_2to2: [Elastic]\n"
        "  strings: false\n"
        "  nnbar_treatment: resonances\n"
        "  isotropic: true\n"
    )
    config = CollisionConfig.from_yaml(path)
    assert config.elastic_parameter == 12.5
    assert config.included_2to2 == IncludedReactions.ELASTIC
    assert not config.strings
    assert config.nnbar_treatment == NNbarTreatment.RESONANCES
    assert config.isotropic
    assert config.two_to_one


def test_from_yaml_plain_mapping(tmp_path):
    path = tmp_path / "plain.yaml"
    path.write_text("low_snn_cut: 2.1\n")
    assert CollisionConfig.from_yaml(path).low_snn_cut == 2.1
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert CollisionConfig.from_yaml(empty) == CollisionConfig()
