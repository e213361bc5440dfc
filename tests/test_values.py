import pytest

from helm_steward.utils.values import deep_merge, load_values, parse_set


def test_deep_merge_is_recursive_and_non_mutating():
    base = {"image": {"repository": "nginx", "tag": "1.0"}, "replicas": 1}
    merged = deep_merge(base, {"image": {"tag": "2.0"}})
    assert merged == {"image": {"repository": "nginx", "tag": "2.0"}, "replicas": 1}
    assert base["image"]["tag"] == "1.0"


def test_parse_set_nests_keys_and_reads_yaml_scalars():
    assert parse_set("a.b.c=2") == {"a": {"b": {"c": 2}}}
    assert parse_set("enabled=true") == {"enabled": True}
    assert parse_set("name=") == {"name": ""}


def test_parse_set_requires_value():
    with pytest.raises(ValueError):
        parse_set("novalue")


def test_load_values_sets_override_files(tmp_path):
    first = tmp_path / "a.yaml"
    first.write_text("image:\n  tag: '1.0'\nreplicas: 1\n")
    second = tmp_path / "b.yaml"
    second.write_text("replicas: 3\n")

    values = load_values([first, second], ["image.tag=2.0"])

    assert values == {"image": {"tag": 2.0}, "replicas": 3}


def test_load_values_rejects_non_mapping(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="not a mapping"):
        load_values([bad])
