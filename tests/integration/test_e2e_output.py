"""End-to-end tests that run the CLI and verify the written models."""

import struct
from pathlib import Path

import pytest
import trimesh
from typer.testing import CliRunner

from svgsolid import __version__
from svgsolid.cli.app import app

runner = CliRunner()

LOGO_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="40" height="30">
  <g id="logo" transform="translate(5, 5)">
    <path fill-rule="evenodd" d="M0,0 H30 V20 H0 Z M5,5 H25 V15 H5 Z"/>
    <circle cx="15" cy="10" r="3"/>
  </g>
  <text x="0" y="0">label</text>
</svg>
"""
OPEN_LINE_SVG = '<svg xmlns="http://www.w3.org/2000/svg"><line x1="0" y1="0" x2="30" y2="0"/></svg>'


@pytest.fixture
def logo(tmp_path: Path) -> Path:
    path = tmp_path / "logo.svg"
    path.write_text(LOGO_SVG, encoding="utf-8")
    return path


def read_binary_stl(path: Path) -> tuple[int, bytes]:
    blob = path.read_bytes()
    (count,) = struct.unpack("<I", blob[80:84])
    return count, blob


class TestConvert:
    """Single-file conversion through the CLI."""

    def test_writes_binary_stl_next_to_input(self, logo: Path):
        result = runner.invoke(app, [str(logo), "-b", "0", "--simplify", "0"])

        assert result.exit_code == 0, result.output
        output = logo.with_suffix(".stl")
        count, blob = read_binary_stl(output)
        assert count > 0
        assert len(blob) == 84 + 50 * count

        mesh = trimesh.load(output, force="mesh")
        assert mesh.is_watertight
        # Frame area 600 - 200 plus the disc inside the window
        assert mesh.volume == pytest.approx(3.0 * (400 + 3.14159 * 9), rel=0.02)

    def test_explicit_output_and_overrides(self, logo: Path, tmp_path: Path):
        output = tmp_path / "models" / "sign.stl"
        result = runner.invoke(
            app, [str(logo), "-o", str(output), "-t", "5", "-b", "1.5", "--bevel", "0.5"]
        )

        assert result.exit_code == 0, result.output
        mesh = trimesh.load(output, force="mesh")
        assert mesh.extents[2] == pytest.approx(6.5)

    def test_output_directory(self, logo: Path, tmp_path: Path):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        result = runner.invoke(app, [str(logo), "-o", str(out_dir)])

        assert result.exit_code == 0, result.output
        assert (out_dir / "logo.stl").exists()

    def test_ascii(self, logo: Path):
        result = runner.invoke(app, [str(logo), "--ascii", "-q"])

        assert result.exit_code == 0, result.output
        assert logo.with_suffix(".stl").read_bytes().startswith(b"solid")

    def test_existing_output_requires_force(self, logo: Path):
        output = logo.with_suffix(".stl")
        output.write_bytes(b"old")

        result = runner.invoke(app, [str(logo)])
        assert result.exit_code == 1
        assert output.read_bytes() == b"old"

        result = runner.invoke(app, [str(logo), "--force"])
        assert result.exit_code == 0, result.output
        assert output.read_bytes() != b"old"

    def test_unparseable_file(self, tmp_path: Path):
        path = tmp_path / "broken.svg"
        path.write_text("<svg><rect", encoding="utf-8")

        result = runner.invoke(app, [str(path)])
        assert result.exit_code == 1
        assert not path.with_suffix(".stl").exists()


class TestCheck:
    """Preflight-only runs."""

    def test_check_passes_without_writing(self, logo: Path):
        result = runner.invoke(app, [str(logo), "--check", "--verbose"])

        assert result.exit_code == 0, result.output
        assert not logo.with_suffix(".stl").exists()
        assert "text" in result.output

    def test_check_fails_on_open_line(self, tmp_path: Path):
        path = tmp_path / "line.svg"
        path.write_text(OPEN_LINE_SVG, encoding="utf-8")

        result = runner.invoke(app, [str(path), "--check"])
        assert result.exit_code == 1
        assert "No closed shapes found" in result.output

    def test_check_many(self, logo: Path, tmp_path: Path):
        line = tmp_path / "line.svg"
        line.write_text(OPEN_LINE_SVG, encoding="utf-8")

        assert runner.invoke(app, [str(logo), str(logo), "--check", "-q"]).exit_code == 0
        assert runner.invoke(app, [str(logo), str(line), "--check", "-q"]).exit_code == 1


class TestOptions:
    """Argument handling."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_list_profiles(self):
        result = runner.invoke(app, ["--list-profiles"])
        assert result.exit_code == 0
        for profile_id in ("logo-sign", "cookie-cutter", "stamp", "keychain"):
            assert profile_id in result.output

    def test_missing_input(self, tmp_path: Path):
        result = runner.invoke(app, [str(tmp_path / "nope.svg")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_profile(self, logo: Path):
        result = runner.invoke(app, [str(logo), "--profile", "teapot"])
        assert result.exit_code == 1
        assert "Unknown profile" in result.output

    def test_verbose_and_quiet(self, logo: Path):
        assert runner.invoke(app, [str(logo), "-v", "-q"]).exit_code == 1

    def test_out_of_range_setting_warns(self, logo: Path):
        result = runner.invoke(app, [str(logo), "-t", "50", "--check"])
        assert result.exit_code == 0
        assert "outside" in result.output


class TestBatch:
    """Several inputs converted with worker processes."""

    def test_converts_every_file(self, tmp_path: Path):
        inputs = []
        for name in ("a", "b", "c"):
            path = tmp_path / f"{name}.svg"
            path.write_text(LOGO_SVG, encoding="utf-8")
            inputs.append(str(path))
        out_dir = tmp_path / "models"
        log_file = tmp_path / "batch.log"

        result = runner.invoke(
            app, [*inputs, "-o", str(out_dir), "-j", "2", "--log-file", str(log_file)]
        )

        assert result.exit_code == 0, result.output
        blobs = [(out_dir / f"{name}.stl").read_bytes() for name in ("a", "b", "c")]
        assert blobs[0] == blobs[1] == blobs[2]
        assert log_file.exists()

    def test_reports_failures(self, logo: Path, tmp_path: Path):
        broken = tmp_path / "broken.svg"
        broken.write_text("<svg><rect", encoding="utf-8")
        out_dir = tmp_path / "models"

        result = runner.invoke(
            app, [str(logo), str(broken), "-o", str(out_dir), "--log-file", str(tmp_path / "b.log")]
        )

        assert result.exit_code == 1
        assert (out_dir / "logo.stl").exists()
        assert not (out_dir / "broken.stl").exists()
