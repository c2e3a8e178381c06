"""
Tests for the command-line entrypoint.
"""
import pytest

from redesigner.api import cli
from redesigner.core.types import ErrorKind, Failure, Success


@pytest.fixture
def photo(tmp_path, sample_jpeg_bytes):
    path = tmp_path / "room.jpg"
    path.write_bytes(sample_jpeg_bytes)
    return path


@pytest.fixture
def captured_call(monkeypatch):
    """Replace the engine call and record what the CLI passed to it."""
    calls = []

    def install(result):
        async def fake_process(image, params, config, transport=None):
            calls.append((image, params, config))
            return result

        monkeypatch.setattr(cli, "process_redesign", fake_process)
        return calls

    monkeypatch.setenv("STABILITY_API_KEY", "sk-cli")
    monkeypatch.delenv("IMAGE_PROVIDER", raising=False)
    return install


class TestCli:

    def test_writes_render(self, photo, tmp_path, captured_call):
        calls = captured_call(Success(b"render", "image/webp"))
        output = tmp_path / "out.webp"

        code = cli.main([str(photo), "--style", "Modern", "--room-type", "kitchen",
                         "--strength", "0.5", "-o", str(output)])

        assert code == 0
        assert output.read_bytes() == b"render"
        image, params, config = calls[0]
        assert image.filename == "room.jpg"
        assert image.mime_type == "image/jpeg"
        assert params.style == "Modern"
        assert params.room_type == "kitchen"
        assert params.image_strength == "0.5"
        assert config.api_key() == "sk-cli"

    def test_default_output_name(self, photo, tmp_path, captured_call, monkeypatch):
        captured_call(Success(b"render", "image/png"))
        monkeypatch.chdir(tmp_path)

        assert cli.main([str(photo)]) == 0
        assert (tmp_path / "redesign.png").read_bytes() == b"render"

    def test_failure_exit_code(self, photo, captured_call, capsys):
        captured_call(Failure(ErrorKind.PROVIDER_REJECTED, "bad engine"))

        code = cli.main([str(photo)])

        assert code == 1
        assert "error: provider_rejected: bad engine" in capsys.readouterr().err

    def test_unreadable_photo(self, tmp_path, captured_call, capsys):
        calls = captured_call(Success(b"render", "image/png"))

        code = cli.main([str(tmp_path / "missing.jpg")])

        assert code == 2
        assert calls == []
        assert "cannot read" in capsys.readouterr().err

    def test_empty_photo(self, tmp_path, captured_call, capsys):
        calls = captured_call(Success(b"render", "image/png"))
        empty = tmp_path / "empty.jpg"
        empty.write_bytes(b"")

        code = cli.main([str(empty)])

        assert code == 2
        assert calls == []
        assert "missing_image" in capsys.readouterr().err
