"""
Tests for use cases — info gathering, catalog update, scanning.
"""

import json
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

from assetinfo.core.config.catalog_loader import write_program
from assetinfo.core.config.loader import Config
from assetinfo.core.errors import DockerError, EndOfLifeError, HashDatabaseError, UpdateError
from assetinfo.core.models import (
    BinaryExtractor,
    DockerExtractor,
    Program,
    ProgramInfo,
    ReleaseCycle,
)
from assetinfo.core.services.hash_database import (
    InMemoryHashDatabase,
    JsonHashDatabase,
    RemoteHashDatabase,
)
from assetinfo.core.use_cases.info import Detection, gather_all, gather_program_info
from assetinfo.core.use_cases.scan import build_databases, run_scan
from assetinfo.core.use_cases.update import update_catalog

BARE_REGEX = r"^(?<version>(?<cycle>(?<major>\d+)\.(?<minor>\d+))\.(?<patch>\d+))"
_LIST_CONTAINERS = "assetinfo.core.services.extractors.docker_adapter.list_containers"

RC_118 = ReleaseCycle(
    cycle="1.18",
    release_date=date(2020, 4, 21),
    eol=date(2021, 4, 20),
    latest="1.18.0",
)


def _program(script: Path | None, *, docker: bool = True, eol_id: str | None = "nginx") -> Program:
    return Program(
        info=ProgramInfo(id="nginx", title="nginx", endoflife_date_id=eol_id),
        binary=[BinaryExtractor(path=script, regex=BARE_REGEX)] if script else None,
        docker=DockerExtractor(image_name="nginx", regex=BARE_REGEX) if docker else None,
    )


# ── Info ─────────────────────────────────────────────────────────────


class TestGatherProgramInfo:
    @patch(_LIST_CONTAINERS, return_value=[])
    def test_binary_found(self, _ls, make_script):
        report = gather_program_info(_program(make_script("echo 1.18.0")))
        assert report.found
        assert len(report.detections) == 1
        detection = report.detections[0]
        assert detection.source == "Binary"
        assert detection.version.cycle == "1.18"
        assert detection.release_cycle is None

    @patch(_LIST_CONTAINERS, side_effect=DockerError("Docker daemon not available"))
    def test_failure_does_not_block_siblings(self, _ls, make_script):
        report = gather_program_info(_program(make_script("echo 1.18.0")))
        assert [d.source for d in report.detections] == ["Binary", "Docker"]
        assert report.detections[0].ok
        assert report.detections[1].error == "Docker daemon not available"
        assert report.found
        assert report.failed

    @patch(_LIST_CONTAINERS, return_value=[])
    def test_inapplicable_sources_produce_no_rows(self, _ls, tmp_path: Path):
        report = gather_program_info(_program(tmp_path / "missing"))
        assert report.detections == []
        assert not report.found

    def test_no_extractors(self):
        report = gather_program_info(Program(info=ProgramInfo(id="x", title="X")))
        assert report.detections == []

    def test_end_of_life_lookup(self, make_script):
        client = MagicMock()
        client.get_release_cycle.return_value = RC_118

        report = gather_program_info(_program(make_script("echo 1.18.0"), docker=False), eol_client=client)

        client.get_release_cycle.assert_called_once_with("nginx", "1.18")
        assert report.detections[0].release_cycle == RC_118

    def test_end_of_life_failure_is_not_fatal(self, make_script):
        client = MagicMock()
        client.get_release_cycle.side_effect = EndOfLifeError("HTTP 404")

        report = gather_program_info(_program(make_script("echo 1.18.0"), docker=False), eol_client=client)

        assert report.detections[0].ok
        assert report.detections[0].release_cycle is None

    def test_no_end_of_life_id(self, make_script):
        client = MagicMock()
        gather_program_info(_program(make_script("echo 1.18.0"), docker=False, eol_id=None), eol_client=client)
        client.get_release_cycle.assert_not_called()

    def test_to_dict(self, make_script):
        client = MagicMock()
        client.get_release_cycle.return_value = RC_118
        report = gather_program_info(_program(make_script("echo 1.18.0"), docker=False), eol_client=client)

        data = report.to_dict(today=date(2021, 4, 30))

        assert data["id"] == "nginx"
        row = data["detections"][0]
        assert row["version"]["string"] == "1.18.0"
        assert row["release_cycle"]["releaseDate"] == "2020-04-21"
        assert row["supported"] is False
        assert row["eol_days"] == -10
        json.dumps(data)

    def test_detection_without_version(self):
        row = Detection(source="Binary").to_dict()
        assert row == {"source": "Binary"}

    def test_detection_with_error(self):
        row = Detection(source="Docker", error="daemon down").to_dict()
        assert row == {"source": "Docker", "error": "daemon down"}


class TestGatherAll:
    def test_sorted_by_title(self):
        programs = [
            Program(info=ProgramInfo(id="b", title="redis")),
            Program(info=ProgramInfo(id="a", title="Apache")),
            Program(info=ProgramInfo(id="c", title="mattermost")),
        ]
        reports = gather_all(programs)
        assert [r.info.title for r in reports] == ["Apache", "mattermost", "redis"]


# ── Update ───────────────────────────────────────────────────────────


class TestUpdateCatalog:
    def test_folder_is_a_file(self, tmp_path: Path):
        path = tmp_path / "database"
        path.write_text("")
        result = update_catalog(Config(database_folder=path, update_url="http://x/y.tar.zstd"))
        assert result.error is not None
        assert "not a folder" in result.error

    def test_no_url(self, tmp_path: Path):
        result = update_catalog(Config(database_folder=tmp_path / "database"))
        assert result.error == "No update URL configured"
        assert (tmp_path / "database").is_dir()

    @patch("assetinfo.core.use_cases.update.CatalogUpdater")
    def test_success_reloads_catalog(self, mock_updater: MagicMock, tmp_path: Path):
        folder = tmp_path / "database"

        def _install():
            write_program(folder, Program(info=ProgramInfo(id="nginx", title="nginx")))
            return ["nginx.json"]

        mock_updater.return_value.run.side_effect = _install

        result = update_catalog(Config(database_folder=folder, update_url="http://x/y.tar.zstd"))

        assert result.error is None
        assert result.installed == ["nginx.json"]
        assert result.programs_loaded == 1
        assert result.to_dict()["programs_loaded"] == 1

    @patch("assetinfo.core.use_cases.update.CatalogUpdater")
    def test_failure_reported(self, mock_updater: MagicMock, tmp_path: Path):
        mock_updater.return_value.run.side_effect = UpdateError("Download failed: boom")
        result = update_catalog(Config(database_folder=tmp_path, update_url="http://x/y.tar.zstd"))
        assert result.to_dict() == {"error": "Download failed: boom"}


# ── Scan ─────────────────────────────────────────────────────────────


class TestRunScan:
    def test_sorted_results(self, tmp_path: Path):
        for name in ("c.txt", "a.txt", "b.txt"):
            (tmp_path / name).write_bytes(name.encode())
        result = run_scan([tmp_path], [InMemoryHashDatabase()])
        assert [r.file_path.name for r in result.results] == ["a.txt", "b.txt", "c.txt"]
        assert result.identified == 0

    def test_database_error(self, tmp_path: Path):
        (tmp_path / "a.txt").write_bytes(b"a")
        failing = MagicMock()
        failing.get.side_effect = HashDatabaseError("backend down")
        result = run_scan([tmp_path], [failing])
        assert result.error == "backend down"
        assert result.to_dict() == {"error": "backend down"}

    def test_missing_folder(self, tmp_path: Path):
        result = run_scan([tmp_path / "nope"], [])
        assert result.error is not None


class TestBuildDatabases:
    def test_order(self, tmp_path: Path):
        configured = tmp_path / "configured.json"
        extra = tmp_path / "extra.json"
        configured.write_text("{}")
        extra.write_text("{}")
        config = Config(hash_databases=[configured], hash_database_url="https://hashes.example.org")

        databases = build_databases(config, [extra])

        assert [type(d) for d in databases] == [JsonHashDatabase, JsonHashDatabase, RemoteHashDatabase]
        assert databases[0].path == extra
        assert databases[1].path == configured

    def test_none_configured(self):
        assert build_databases(Config()) == []
