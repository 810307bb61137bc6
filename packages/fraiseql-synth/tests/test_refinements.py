"""Tests for refinement files."""

import pytest

from fraiseql_synth.exceptions import ConfigurationError, UnknownGeneratorError
from fraiseql_synth.generators.numeric import IntGenerator
from fraiseql_synth.generators.people import EmailGenerator
from fraiseql_synth.generators.wrappers import ArrayGenerator, WeightedRandomGenerator
from fraiseql_synth.models import WeightedCount
from fraiseql_synth.refinements import load_refinements, parse_refinements

REFINEMENTS_YAML = """
users:
  count: 5
  columns:
    email:
      generator: email
    nickname: false
  with:
    posts: 2
posts:
  columns:
    score:
      generator: weighted_random
      weighted_values:
        - weight: 0.5
          value: {generator: int, min_value: 0, max_value: 10}
        - weight: 0.5
          value: {generator: int, min_value: 90, max_value: 100}
  with:
    comments:
      - {weight: 0.7, count: 1}
      - {weight: 0.3, count: [2, 3]}
tags:
"""


def test_load_refinements(tmp_path):
    """A YAML file becomes one refinement per table."""
    path = tmp_path / "refinements.yaml"
    path.write_text(REFINEMENTS_YAML)

    refinements = load_refinements(path)

    users = refinements["users"]
    assert users.count == 5
    assert isinstance(users.columns["email"], EmailGenerator)
    assert users.columns["nickname"] is False
    assert users.with_ == {"posts": 2}

    posts = refinements["posts"]
    assert posts.count is None
    score = posts.columns["score"]
    assert isinstance(score, WeightedRandomGenerator)
    assert [type(entry["value"]) for entry in score.params["weighted_values"]] == [
        IntGenerator,
        IntGenerator,
    ]
    assert score.params["weighted_values"][1]["value"].params == {"min_value": 90, "max_value": 100}
    assert posts.with_["comments"] == [
        WeightedCount(weight=0.7, count=1),
        WeightedCount(weight=0.3, count=[2, 3]),
    ]

    assert refinements["tags"].count is None
    assert refinements["tags"].columns == {}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_refinements(tmp_path / "missing.yaml")


def test_empty_file(tmp_path):
    path = tmp_path / "refinements.yaml"
    path.write_text("")
    assert load_refinements(path) == {}


def test_nested_generators():
    """Wrappers are built with their inner generators."""
    refinements = parse_refinements(
        {"t": {"columns": {"ids": {"generator": "array", "base_column_gen": {"generator": "int"}, "size": 3}}}}
    )
    generator = refinements["t"].columns["ids"]
    assert isinstance(generator, ArrayGenerator)
    assert isinstance(generator.params["base_column_gen"], IntGenerator)
    assert generator.params["size"] == 3


@pytest.mark.parametrize(
    "data",
    [
        ["users"],
        {"users": ["count"]},
        {"users": {"rows": 5}},
        {"users": {"count": -1}},
        {"users": {"count": True}},
        {"users": {"columns": {"email": "email"}}},
        {"users": {"columns": {"email": True}}},
        {"users": {"with": {"posts": "many"}}},
        {"users": {"with": {"posts": [{"weight": 1}]}}},
    ],
)
def test_invalid_refinements(data):
    with pytest.raises(ConfigurationError):
        parse_refinements(data)


def test_unknown_key_lists_allowed_keys():
    with pytest.raises(ConfigurationError, match="Allowed keys are: columns, count, with"):
        parse_refinements({"users": {"rows": 5}})


def test_unknown_generator():
    with pytest.raises(UnknownGeneratorError):
        parse_refinements({"users": {"columns": {"email": {"generator": "nope"}}}})
