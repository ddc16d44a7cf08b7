from __future__ import annotations

from pathlib import Path

import pytest

from promu.core.result import Err, Ok, Result
from promu.output.console import MockConsole
from promu.platform.process import ProcessError
from promu.services import release as release_mod
from promu.services.project import ProjectInfo
from promu.services.release import ReleaseService, tarball_matches, upload_command

INFO = ProjectInfo(name="promu", owner="prometheus", version="0.5.0")


def _fail(stderr: str = "HTTP 502 Bad Gateway") -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("github-release", "upload"),
            returncode=1,
            stdout="",
            stderr=stderr,
        )
    )


class FakeUploader:
    def __init__(self, responses: list[Result[str, ProcessError]] | None = None) -> None:
        self.calls: list[list[str]] = []
        self._responses = responses

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, timeout
        self.calls.append(cmd)
        if self._responses is None:
            return Ok("")
        return self._responses.pop(0)

    @property
    def names(self) -> list[str]:
        return [c[c.index("--name") + 1] for c in self.calls]


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(release_mod, "sleep", recorded.append)
    return recorded


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def _service(tmp_path: Path, console: MockConsole | None = None) -> ReleaseService:
    return ReleaseService(console=console or MockConsole(), cwd=tmp_path)


class TestTarballMatches:
    def test_matching_tarball(self) -> None:
        assert tarball_matches("promu-0.5.0.linux-amd64.tar.gz", INFO)

    def test_other_version_or_name(self) -> None:
        assert not tarball_matches("promu-0.4.0.linux-amd64.tar.gz", INFO)
        assert not tarball_matches("other-0.5.0.tar.gz", INFO)

    def test_requires_platform_segment_and_suffix(self) -> None:
        assert not tarball_matches("promu-0.5.0.tar.gz", INFO)
        assert not tarball_matches("promu-0.5.0.linux-amd64.zip", INFO)
        assert not tarball_matches("xpromu-0.5.0.linux-amd64.tar.gz", INFO)

    def test_name_is_literal(self) -> None:
        info = ProjectInfo(name="exporter[x]", owner="o", version="1.0")
        assert tarball_matches("exporter[x]-1.0.linux-arm.tar.gz", info)
        assert not tarball_matches("exporterx-1.0.linux-arm.tar.gz", info)


def test_upload_command(tmp_path: Path) -> None:
    path = tmp_path / "promu-0.5.0.linux-amd64.tar.gz"
    assert upload_command(path, INFO) == [
        "github-release",
        "upload",
        "--user",
        "prometheus",
        "--repo",
        "promu",
        "--tag",
        "v0.5.0",
        "--name",
        "promu-0.5.0.linux-amd64.tar.gz",
        "--file",
        str(path),
    ]


class TestUploadWithRetry:
    def test_succeeds_on_third_attempt(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader([_fail(), _fail(), Ok(""), Ok("")])
        monkeypatch.setattr(release_mod, "run_process", uploader)
        console = MockConsole()
        path = _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        result = _service(tmp_path, console).upload_with_retry(path, INFO, retries=2)

        assert result == Ok(None)
        assert len(uploader.calls) == 3
        assert sleeps == [2.0, 2.0]
        assert " > uploaded promu-0.5.0.linux-amd64.tar.gz" in console.messages

    def test_zero_retries_fails_immediately(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader([_fail("already_exists")])
        monkeypatch.setattr(release_mod, "run_process", uploader)
        console = MockConsole()
        path = _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        result = _service(tmp_path, console).upload_with_retry(path, INFO, retries=0)

        assert isinstance(result, Err)
        assert result.error.kind == "upload_failed"
        assert result.error.hint == "already_exists"
        assert len(uploader.calls) == 1
        assert sleeps == []
        assert "error: Upload failed after 1 attempts" in console.messages

    def test_exhaustion_reports_attempt_count(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader([_fail(), _fail(), _fail()])
        monkeypatch.setattr(release_mod, "run_process", uploader)
        console = MockConsole()
        path = _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        result = _service(tmp_path, console).upload_with_retry(path, INFO, retries=2)

        assert isinstance(result, Err)
        assert len(uploader.calls) == 3
        # No sleep after the final attempt.
        assert sleeps == [2.0, 2.0]
        assert "error: Upload failed after 3 attempts" in console.messages

    def test_first_success_makes_one_attempt(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        path = _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        assert _service(tmp_path).upload_with_retry(path, INFO, retries=5) == Ok(None)
        assert len(uploader.calls) == 1
        assert sleeps == []


class TestRelease:
    def test_uploads_matching_files_in_walk_order(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        root = tmp_path / ".tarballs"
        _touch(root / "promu-0.5.0.linux-amd64.tar.gz")
        _touch(root / "promu-0.4.0.linux-amd64.tar.gz")
        _touch(root / "other-0.5.0.tar.gz")
        _touch(root / "sha256sums.txt")
        _touch(root / "arm" / "promu-0.5.0.linux-arm.tar.gz")
        _touch(root / "z" / "promu-0.5.0.windows-386.tar.gz")

        result = _service(tmp_path).release(location=root, info=INFO, retries=2)

        assert isinstance(result, Ok)
        assert uploader.names == [
            "promu-0.5.0.linux-arm.tar.gz",
            "promu-0.5.0.linux-amd64.tar.gz",
            "promu-0.5.0.windows-386.tar.gz",
        ]
        assert [p.name for p in result.value] == uploader.names
        assert sleeps == []

    def test_no_matches_is_not_an_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        _touch(tmp_path / "README.md")

        assert _service(tmp_path).release(location=tmp_path, info=INFO, retries=2) == Ok([])
        assert uploader.calls == []

    def test_exhausted_file_aborts_remaining_walk(
        self, monkeypatch: pytest.MonkeyPatch, sleeps: list[float], tmp_path: Path
    ) -> None:
        uploader = FakeUploader([_fail(), _fail(), Ok("")])
        monkeypatch.setattr(release_mod, "run_process", uploader)
        _touch(tmp_path / "promu-0.5.0.darwin-amd64.tar.gz")
        _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        result = _service(tmp_path).release(location=tmp_path, info=INFO, retries=1)

        assert isinstance(result, Err)
        assert result.error.kind == "upload_failed"
        assert "promu-0.5.0.darwin-amd64.tar.gz" in result.error.message
        assert uploader.names == ["promu-0.5.0.darwin-amd64.tar.gz"] * 2
        assert sleeps == [2.0]

    def test_file_location_uploads_that_file(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        tarball = _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")
        _touch(tmp_path / "promu-0.5.0.darwin-amd64.tar.gz")

        result = _service(tmp_path).release(location=tarball, info=INFO, retries=2)

        assert result == Ok([tarball])
        assert uploader.names == ["promu-0.5.0.linux-amd64.tar.gz"]

    def test_non_matching_file_location_uploads_nothing(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        checksums = _touch(tmp_path / "sha256sums.txt")

        assert _service(tmp_path).release(location=checksums, info=INFO, retries=2) == Ok([])
        assert uploader.calls == []

    def test_missing_location_is_walk_failure(self, tmp_path: Path) -> None:
        result = _service(tmp_path).release(location=tmp_path / "nope", info=INFO, retries=2)
        assert isinstance(result, Err)
        assert result.error.kind == "walk_failed"

    def test_unreadable_directory_is_walk_failure(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def broken_iterdir(self: Path):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "iterdir", broken_iterdir)

        result = _service(tmp_path).release(location=tmp_path, info=INFO, retries=2)
        assert isinstance(result, Err)
        assert result.error.kind == "walk_failed"
        assert "Permission denied" in result.error.message

    def test_negative_retries_rejected(self, tmp_path: Path) -> None:
        result = _service(tmp_path).release(location=tmp_path, info=INFO, retries=-1)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_dry_run_uploads_nothing(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        uploader = FakeUploader()
        monkeypatch.setattr(release_mod, "run_process", uploader)
        console = MockConsole()
        _touch(tmp_path / "promu-0.5.0.linux-amd64.tar.gz")

        result = _service(tmp_path, console).release(
            location=tmp_path, info=INFO, retries=2, dry_run=True
        )

        assert isinstance(result, Ok)
        assert uploader.calls == []
        assert console.find("github-release upload --user prometheus")
