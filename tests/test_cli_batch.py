"""Tests for inksplit.cli.batch: CLI batch separator."""

import os

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import numpy as np
import pytest

from inksplit.cli.batch import build_parser, build_settings, discover_files, main
from inksplit.domain.models import EffectKind, FilterKind
from inksplit.kernel.image.io import save_image
from inksplit.kernel.system.config import APP_CONFIG


@pytest.fixture
def photo(tmp_path):
    img = np.zeros((12, 10, 4), dtype=np.uint8)
    img[..., 0] = 255
    img[..., 3] = 255
    return save_image(img, str(tmp_path / "in" / "photo.png"), "PNG")


class TestBuildParser:
    def test_minimal_args(self):
        args = build_parser().parse_args(["input.png"])
        assert args.inputs == ["input.png"]
        assert args.channels == "cmyk"
        assert args.filter is None
        assert args.effect is None
        assert args.colors is None
        assert args.output == APP_CONFIG.default_export_dir
        assert args.output_format == "jpeg"
        assert args.pdf is False

    def test_repeated_colors(self):
        args = build_parser().parse_args(["a.png", "--color", "#000", "--color", "navy"])
        assert args.colors == ["#000", "navy"]

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert capsys.readouterr().out.startswith("inksplit ")

    def test_invalid_effect_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["a.png", "--effect", "emboss"])

    def test_build_settings(self):
        args = build_parser().parse_args(
            ["a.png", "--effect", "halftone", "--filter", "sepia", "--color", "red"]
        )
        settings = build_settings(args)
        assert settings.effect is EffectKind.HALFTONE
        assert settings.filter is FilterKind.SEPIA
        assert settings.colors == ("red",)

    def test_separate_only_ignores_stages(self):
        args = build_parser().parse_args(
            ["a.png", "--separate-only", "--effect", "dither", "--color", "red"]
        )
        assert args.separate_only is True
        settings = build_settings(args)
        assert settings.effect is None
        assert settings.colors is None


class TestDiscoverFiles:
    def test_directory_expansion(self, tmp_path):
        (tmp_path / "b.png").write_bytes(b"x")
        (tmp_path / "a.JPG").write_bytes(b"x")
        (tmp_path / "notes.txt").write_text("x")
        found = discover_files([str(tmp_path)])
        assert [os.path.basename(p) for p in found] == ["a.JPG", "b.png"]

    def test_duplicates_and_missing(self, tmp_path):
        f = tmp_path / "a.png"
        f.write_bytes(b"x")
        found = discover_files([str(f), str(tmp_path), str(tmp_path / "missing.png")])
        assert found == [str(f)]


class TestMain:
    def test_writes_every_plate(self, photo, tmp_path, capsys):
        out = tmp_path / "out"
        assert main([photo, "--output", str(out)]) == 0
        assert sorted(os.listdir(out)) == [
            "photo_black.jpeg",
            "photo_cyan.jpeg",
            "photo_magenta.jpeg",
            "photo_yellow.jpeg",
        ]
        printed = [
            line for line in capsys.readouterr().out.splitlines() if line.startswith(str(out))
        ]
        assert [os.path.basename(p) for p in printed] == [
            "photo_cyan.jpeg",
            "photo_magenta.jpeg",
            "photo_yellow.jpeg",
            "photo_black.jpeg",
        ]

    def test_subset_as_png_with_pdf(self, photo, tmp_path):
        out = tmp_path / "out"
        code = main(
            [photo, "--output", str(out), "--channels", "ck", "--format", "png",
             "--effect", "threshold", "--color", "#0b3d91", "--pdf"]
        )
        assert code == 0
        assert sorted(os.listdir(out)) == ["photo.pdf", "photo_black.png", "photo_cyan.png"]

    def test_gradient_colors_do_not_label_files(self, photo, tmp_path):
        out = tmp_path / "out"
        assert main([photo, "--output", str(out), "--color", "#ff0000", "--color", "#00ff00"]) == 0
        assert sorted(os.listdir(out)) == [
            "photo_black.jpeg",
            "photo_cyan.jpeg",
            "photo_magenta.jpeg",
            "photo_yellow.jpeg",
        ]

    def test_label_colors_suffix_files_by_position(self, photo, tmp_path):
        out = tmp_path / "out"
        code = main(
            [photo, "--output", str(out), "--channels", "cmk", "--pdf",
             "--label-color", "#00FFFF", "--label-color", "#ff00ff"]
        )
        assert code == 0
        assert sorted(os.listdir(out)) == [
            "photo.pdf",
            "photo_black.jpeg",
            "photo_cyan_00FFFF.jpeg",
            "photo_magenta_ff00ff.jpeg",
        ]

    def test_bad_channels(self, photo, tmp_path):
        assert main([photo, "--output", str(tmp_path), "--channels", "xyz"]) == 2

    def test_no_inputs(self, tmp_path):
        assert main([str(tmp_path / "missing.png")]) == 1

    def test_unreadable_file_fails(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not a png")
        assert main([str(bad), "--output", str(tmp_path / "out")]) == 1
