import hashlib

import pytest

from helm_steward.core.downloader import RepoChartDownloader, resolve_chart_url, write_archive
from helm_steward.core.errors import ChartNotFoundError, DownloadError, RepositoryNotFoundError
from helm_steward.core.repository import RepositoryIndexStore
from helm_steward.models.repo import RepositoryEntry

from helpers import chart_archive, index_yaml
from fakes import FakeGetter

REPO = "https://charts.example.com"


@pytest.fixture
def archive(tmp_path):
    return chart_archive(tmp_path / "build", "nginx", "1.2.0")


@pytest.fixture
def downloader(tmp_path, archive):
    index = index_yaml({"nginx": [
        {"version": "1.0.0", "urls": ["nginx-1.0.0.tgz"]},
        {"version": "1.2.0", "urls": ["charts/nginx-1.2.0.tgz"], "digest": hashlib.sha256(archive).hexdigest()},
    ]})
    getter = FakeGetter({
        f"{REPO}/index.yaml": index,
        f"{REPO}/charts/nginx-1.2.0.tgz": archive,
    })
    store = RepositoryIndexStore(tmp_path / "repositories.yaml", tmp_path / "cache", getter)
    store.add_repository(RepositoryEntry("stable", REPO))
    return RepoChartDownloader(store)


def test_resolve_chart_url():
    assert resolve_chart_url(REPO, "a/b.tgz") == f"{REPO}/a/b.tgz"
    assert resolve_chart_url(f"{REPO}/", "https://cdn.example.com/b.tgz") == "https://cdn.example.com/b.tgz"


def test_download_latest_verifies_digest(downloader, tmp_path, archive):
    path, verification = downloader.download_to("stable/nginx", "", tmp_path / "dl")

    assert path == tmp_path / "dl" / "nginx-1.2.0.tgz"
    assert path.read_bytes() == archive
    assert verification.verified


def test_download_by_url(downloader, tmp_path, archive):
    downloader.repositories.getter.responses["https://cdn.example.com/x/nginx-1.2.0.tgz"] = archive

    path, verification = downloader.download_to("https://cdn.example.com/x/nginx-1.2.0.tgz", "", tmp_path / "dl")

    assert path.name == "nginx-1.2.0.tgz"
    assert not verification.verified


def test_missing_version(downloader, tmp_path):
    with pytest.raises(ChartNotFoundError, match="version '9.9.9' not found"):
        downloader.download_to("stable/nginx", "9.9.9", tmp_path / "dl")


def test_missing_chart(downloader, tmp_path):
    with pytest.raises(ChartNotFoundError, match="'redis' not found"):
        downloader.download_to("stable/redis", "", tmp_path / "dl")


def test_unknown_repository(downloader, tmp_path):
    with pytest.raises(RepositoryNotFoundError):
        downloader.download_to("other/nginx", "", tmp_path / "dl")


def test_reference_without_repository(downloader, tmp_path):
    with pytest.raises(ChartNotFoundError, match="repo_name/path_to_chart"):
        downloader.download_to("nginx", "", tmp_path / "dl")


def test_download_failure_propagates(downloader, tmp_path):
    with pytest.raises(DownloadError):
        downloader.download_to("stable/nginx", "1.0.0", tmp_path / "dl")


def test_write_archive_rejects_digest_mismatch(tmp_path):
    with pytest.raises(DownloadError, match="digest mismatch"):
        write_archive(b"data", f"{REPO}/a-1.0.0.tgz", tmp_path, expected_digest="0" * 64)
    assert not (tmp_path / "a-1.0.0.tgz").exists()
