import stat

import pytest
import yaml

from helm_steward.models.repo import IndexFile, RepositoryEntry, RepositoryFile


def test_missing_repository_file_is_empty(tmp_path):
    repo_file = RepositoryFile.load(tmp_path / "nope.yaml")
    assert repo_file.repositories == []


def test_non_mapping_repository_entry_is_rejected():
    with pytest.raises(ValueError, match="repository entry must be a mapping"):
        RepositoryFile.from_dict({"repositories": ["foo"]})


def test_update_replaces_by_name_and_keeps_order():
    repo_file = RepositoryFile()
    repo_file.update(RepositoryEntry("a", "https://a.example"), RepositoryEntry("b", "https://b.example"))
    repo_file.update(RepositoryEntry("a", "https://a2.example"))

    assert [e.name for e in repo_file.repositories] == ["a", "b"]
    assert repo_file.get("a").url == "https://a2.example"
    assert repo_file.has("b")
    assert not repo_file.has("c")


def test_find_by_url_ignores_trailing_slash():
    repo_file = RepositoryFile(repositories=[RepositoryEntry("a", "https://a.example/charts/")])
    assert repo_file.find_by_url("https://a.example/charts").name == "a"


def test_write_uses_helm_keys_and_file_mode(tmp_path):
    path = tmp_path / "repositories.yaml"
    repo_file = RepositoryFile()
    repo_file.update(RepositoryEntry("a", "https://a.example", ca_file="/ca.pem", insecure_skip_tls_verify=True))
    repo_file.write(path, 0o600)

    data = yaml.safe_load(path.read_text())
    assert data["repositories"][0]["caFile"] == "/ca.pem"
    assert data["repositories"][0]["insecure_skip_tls_verify"] is True
    assert data["generated"]
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert RepositoryFile.load(path).get("a").ca_file == "/ca.pem"


def test_index_requires_api_version():
    with pytest.raises(ValueError, match="no API version"):
        IndexFile.loads(b"entries: {}\n")


def test_index_get_picks_highest_matching():
    index = IndexFile.loads(
        b"apiVersion: v1\n"
        b"entries:\n"
        b"  nginx:\n"
        b"  - {version: 1.0.0, urls: [nginx-1.0.0.tgz]}\n"
        b"  - {version: 1.2.0, urls: [nginx-1.2.0.tgz]}\n"
        b"  - {version: 2.0.0-rc.1, urls: [nginx-2.0.0-rc.1.tgz]}\n"
    )

    assert index.chart_names() == ["nginx"]
    assert index.get("nginx").version == "1.2.0"
    assert index.get("nginx", "~1.0").version == "1.0.0"
    assert index.get("nginx", "2.0.0-rc.1").name == "nginx"
    assert index.get("nginx", ">5") is None
    assert index.get("redis") is None


def test_index_latest_skips_numeric_prerelease():
    index = IndexFile.loads(
        b"apiVersion: v1\n"
        b"entries:\n"
        b"  app:\n"
        b"  - {version: 1.0.0-1}\n"
        b"  - {version: 1.0.0}\n"
    )
    assert index.get("app", "").version == "1.0.0"
