import json
import logging

import numpy as np
import pytest

from panoconv.main import main, build_parser

from conftest import write_rgb, read_rgb


@pytest.fixture
def pano(tmp_path):
    path = tmp_path / "pano.png"
    write_rgb(path, np.full((32, 64, 3), (200, 100, 50), dtype=np.uint8))
    return path


@pytest.mark.parametrize("argv", [[], ["only-input.png"], ["a.png", "b.png", "c.png"]])
def test_wrong_argument_count(capsys, argv):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "usage:" in err
    assert "panoconv: error:" in err


def test_unknown_projection(capsys, pano, tmp_path):
    assert main([str(pano), str(tmp_path / "out.png"), "--to", "mercator"]) == 1
    assert "usage:" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "panoconv" in capsys.readouterr().out


def test_defaults():
    args = build_parser().parse_args(["in.png", "out.png"])
    assert args.source_projection is None
    assert args.share_faces is None
    assert args.atomic_write is None
    assert not args.verbose


def test_success(pano, tmp_path):
    output = tmp_path / "cube.png"
    assert main([str(pano), str(output)]) == 0
    assert read_rgb(output).shape == (18, 108, 3)


def test_generic_loop_flag(pano, tmp_path):
    output = tmp_path / "cube.png"
    assert main([str(pano), str(output), "--no-face-sharing", "--workers", "3", "--verbose"]) == 0
    assert (read_rgb(output) == (200, 100, 50)).all()


def test_cubemap_to_lat_long(tmp_path):
    strip = tmp_path / "strip.png"
    write_rgb(strip, np.full((8, 48, 3), (10, 20, 30), dtype=np.uint8))
    output = tmp_path / "pano.png"
    assert main([str(strip), str(output), "--from", "cubemap", "--to", "latlong"]) == 0
    assert read_rgb(output).shape == (14, 28, 3)


def test_separate_faces_layout(pano, tmp_path):
    assert main([str(pano), str(tmp_path / "cube.png"), "--layout", "separate-faces"]) == 0
    assert (tmp_path / "cube_px.png").exists()
    assert (tmp_path / "cube_nz.png").exists()


def test_missing_input_exit_code(tmp_path):
    assert main([str(tmp_path / "missing.png"), str(tmp_path / "out.png")]) == 2


def test_tiny_input_exit_code(tmp_path):
    path = tmp_path / "dot.png"
    write_rgb(path, np.zeros((1, 1, 3), dtype=np.uint8))
    assert main([str(path), str(tmp_path / "out.png")]) == 4
    assert not (tmp_path / "out.png").exists()


def test_unwritable_output_exit_code(pano, tmp_path):
    assert main([str(pano), str(tmp_path / "missing" / "out.png")]) == 5


@pytest.mark.parametrize("workers", ["0", "65"])
def test_invalid_worker_count(pano, tmp_path, workers):
    assert main([str(pano), str(tmp_path / "out.png"), "--workers", workers]) == 1


def test_missing_config_file(pano, tmp_path):
    assert main([str(pano), str(tmp_path / "out.png"), "--config", str(tmp_path / "nope.json")]) == 1


def test_invalid_config_values(pano, tmp_path):
    config = tmp_path / "bad.json"
    config.write_text(json.dumps({'layout': 'cross'}))
    assert main([str(pano), str(tmp_path / "out.png"), "--config", str(config)]) == 1


def test_save_and_replay_config(pano, tmp_path):
    config = tmp_path / "preset.json"
    first = tmp_path / "first.png"
    assert main([str(pano), str(first), "--to", "latlong", "--save-config", str(config)]) == 0

    saved = json.loads(config.read_text())
    assert saved['conversion_config']['target_projection'] == 'latlong'
    assert saved['metadata']['config_name'] == 'preset'

    second = tmp_path / "second.png"
    assert main([str(pano), str(second), "--config", str(config)]) == 0
    assert read_rgb(second).shape == (32, 64, 3)


def test_flags_override_config(pano, tmp_path):
    config = tmp_path / "preset.json"
    config.write_text(json.dumps({'target_projection': 'latlong'}))
    output = tmp_path / "out.png"
    assert main([str(pano), str(output), "--config", str(config), "--to", "cubemap"]) == 0
    assert read_rgb(output).shape == (18, 108, 3)


def test_unexpected_error_is_one_line(caplog, monkeypatch, tmp_path):
    def explode(self, input_path, output_path):
        raise RuntimeError("boom")

    monkeypatch.setattr("panoconv.main.ImageConverter.convert", explode)
    caplog.set_level(logging.DEBUG, logger="panoconv")

    assert main([str(tmp_path / "in.png"), str(tmp_path / "out.png")]) == 1

    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert [r.getMessage() for r in errors] == ["Unexpected error: boom"]
    assert errors[0].exc_info is None
    # The traceback is only available at debug level
    assert any(r.exc_info for r in caplog.records if r.levelno == logging.DEBUG)
