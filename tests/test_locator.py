import os

import pytest

from helm_steward.core.errors import ChartNotFoundError
from helm_steward.core.locator import ChartLocator

from helpers import write_chart
from fakes import FakeChartDownloader


def test_existing_local_path_wins(tmp_path, monkeypatch):
    write_chart(tmp_path, "stable")
    downloader = FakeChartDownloader()
    monkeypatch.chdir(tmp_path)

    # "stable" is both a relative path and a plausible repo name
    path = ChartLocator(tmp_path / "cache", downloader).locate("stable")

    assert path.resolve() == (tmp_path / "stable").resolve()
    assert path.is_absolute()
    assert downloader.calls == []


@pytest.mark.parametrize("ref", ["./missing-chart", "/definitely/not/here", ""])
def test_missing_path_fails_without_download(tmp_path, ref):
    downloader = FakeChartDownloader()

    with pytest.raises(ChartNotFoundError, match="path not found"):
        ChartLocator(tmp_path / "cache", downloader).locate(ref)

    assert downloader.calls == []


def test_downloads_into_cache(tmp_path):
    src = write_chart(tmp_path / "src", "nginx", "1.2.0")
    downloader = FakeChartDownloader({("stable/nginx", "1.2.0"): src})

    path = ChartLocator(tmp_path / "cache", downloader).locate("stable/nginx", "1.2.0")

    assert path == tmp_path / "cache" / "nginx-1.2.0.tgz"
    assert path.exists()
    assert downloader.calls == [("stable/nginx", "1.2.0", tmp_path / "cache")]


def test_download_failure_hints_repo_update(tmp_path):
    locator = ChartLocator(tmp_path / "cache", FakeChartDownloader())

    with pytest.raises(ChartNotFoundError) as exc:
        locator.locate("stable/nginx", "9.9.9")

    assert "at version '9.9.9'" in str(exc.value)
    assert "hsw repo update" in str(exc.value)
    assert exc.value.chart == "stable/nginx"


def test_cache_dir_is_created_with_mode(tmp_path):
    src = write_chart(tmp_path / "src", "nginx")
    cache = tmp_path / "deep" / "cache"
    ChartLocator(cache, FakeChartDownloader({("stable/nginx", ""): src}), 0o750).locate("stable/nginx")

    assert cache.is_dir()
    assert os.stat(cache).st_mode & 0o777 == 0o750 & ~_umask()


def _umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask
