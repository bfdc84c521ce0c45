"""Tests for main.py CLI functionality."""

import io
import json
from unittest.mock import patch

import pytest

from hero_pipeline.core.catalog import catalog_from_tuples
from hero_pipeline.core.config import ProcessingSettings
from hero_pipeline.core.exceptions import InvalidImageKeyError, SourceFetchError
from hero_pipeline.core.services import (
    HeroImageProcessingService,
    ImageEncoderService,
    S3StorageAdapter,
)
from hero_pipeline.handler import HeroImageEventHandler
from hero_pipeline.main import build_parser, load_event, main, run_keys, run_process
from hero_pipeline.testing.fakes import FakeLogger, setup_test_s3_environment


def make_handler():
    fake_s3 = setup_test_s3_environment()
    logger = FakeLogger()
    service = HeroImageProcessingService(
        storage=S3StorageAdapter(fake_s3, "test-bucket", logger),
        encoder=ImageEncoderService(),
        logger=logger,
        catalog=catalog_from_tuples([(320, "jpeg", 80)]),
    )
    return HeroImageEventHandler(
        processing_service=service, logger=logger, settings=ProcessingSettings()
    )


class TestMainCLI:
    """Tests for the main CLI functionality."""

    def test_main_with_no_args_shows_help(self):
        """Test that running main without arguments shows help."""
        with patch("sys.argv", ["hero-pipeline"]):
            with patch("argparse.ArgumentParser.print_help") as mock_help:
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_help.assert_called_once()
                    mock_exit.assert_called_once_with(1)

    def test_main_version_command(self):
        """Test version command output."""
        with patch("sys.argv", ["hero-pipeline", "version"]):
            with patch("builtins.print") as mock_print:
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_print.assert_any_call("Hero Image Pipeline CLI")
                    mock_print.assert_any_call("Version 0.1.0")
                    mock_print.assert_any_call(
                        "Optimized hero image variants for S3-compatible storage"
                    )
                    mock_exit.assert_called_once_with(0)

    def test_main_process_command(self):
        """Test that the process command is dispatched."""
        test_args = ["hero-pipeline", "process", "--image-key", "tenant-7/img9"]

        with patch("sys.argv", test_args):
            with patch("hero_pipeline.main.run_process", return_value=0) as mock_process:
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_process.assert_called_once()
                    args = mock_process.call_args[0][0]
                    assert args.image_key == "tenant-7/img9"
                    mock_exit.assert_called_once_with(0)

    def test_main_process_fatal_error_exits_one(self):
        """Test that fatal processing errors give exit status 1."""
        test_args = ["hero-pipeline", "process", "--image-key", "tenant-7/missing"]

        with patch("sys.argv", test_args):
            with patch(
                "hero_pipeline.main.run_process", side_effect=SourceFetchError("missing")
            ):
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_exit.assert_called_once_with(1)

    def test_main_keyboard_interrupt(self):
        """Test the interrupt exit status."""
        test_args = ["hero-pipeline", "keys", "--image-key", "tenant-7/img9"]

        with patch("sys.argv", test_args):
            with patch("hero_pipeline.main.run_keys", side_effect=KeyboardInterrupt):
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_exit.assert_called_once_with(130)

    def test_main_keys_invalid_key(self):
        """Test that an invalid key gives exit status 1."""
        with patch("sys.argv", ["hero-pipeline", "keys", "--image-key", "img9"]):
            with patch("sys.exit") as mock_exit:
                main()
                mock_exit.assert_called_once_with(1)


class TestParser:
    """Tests for argument parsing."""

    def test_process_requires_a_source(self):
        """Test that --event or --image-key is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["process"])

    def test_process_sources_are_exclusive(self):
        """Test that --event and --image-key cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(
                ["process", "--event", "e.json", "--image-key", "tenant-1/x"]
            )

    def test_process_options(self):
        """Test optional flags."""
        args = build_parser().parse_args(
            [
                "process",
                "--image-key",
                "tenant-1/x",
                "--canonical-url",
                "https://cdn.example.com/x.jpg",
                "--max-workers",
                "2",
                "--fail-when-no-variants",
                "--debug",
            ]
        )
        assert args.max_workers == 2
        assert args.fail_when_no_variants
        assert args.debug


class TestLoadEvent:
    """Tests for load_event."""

    def test_from_image_key(self):
        """Test building an event from flags."""
        args = build_parser().parse_args(
            ["process", "--image-key", "tenant-1/x", "--canonical-url", "https://c/x"]
        )
        event = load_event(args)
        assert event["detail"] == {"canonicalUrl": "https://c/x", "imageKey": "tenant-1/x"}
        assert event["detail-type"] == "HeroImageUpdated"

    def test_from_file(self, tmp_path):
        """Test reading an event file."""
        path = tmp_path / "event.json"
        path.write_text(json.dumps({"detail": {"canonicalUrl": "", "imageKey": "tenant-1/x"}}))

        args = build_parser().parse_args(["process", "--event", str(path)])

        assert load_event(args)["detail"]["imageKey"] == "tenant-1/x"

    def test_from_stdin(self):
        """Test reading an event from stdin."""
        args = build_parser().parse_args(["process", "--event", "-"])
        payload = '{"detail": {"canonicalUrl": "", "imageKey": "tenant-1/y"}}'
        with patch("sys.stdin", io.StringIO(payload)):
            assert load_event(args)["detail"]["imageKey"] == "tenant-1/y"


class TestCommands:
    """Tests for the command implementations."""

    def test_run_process_prints_result(self, capsys):
        """Test that the result is printed as camelCase JSON."""
        args = build_parser().parse_args(["process", "--image-key", "tenant-7/img9"])

        exit_code = run_process(args, handler=make_handler())

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["imageId"] == "img9"
        assert output["anyVariantsProcessed"] is True
        assert output["successfulVariants"][0]["storageKey"] == (
            "tenant-7/img9-320w-jpeg-q80-v1.jpg"
        )

    def test_run_process_applies_overrides(self):
        """Test that CLI flags override environment settings."""
        args = build_parser().parse_args(
            ["process", "--image-key", "tenant-7/img9", "--max-workers", "2", "--fail-when-no-variants"]
        )

        with patch("hero_pipeline.main.HeroImageEventHandler") as mock_handler_cls:
            mock_handler_cls.return_value.handle.return_value.model_dump.return_value = {}
            with patch.dict("os.environ", {}, clear=True):
                with patch("builtins.print"):
                    run_process(args)

        settings = mock_handler_cls.call_args.kwargs["settings"]
        assert settings.max_workers == 2
        assert settings.fail_when_no_variants is True

    def test_run_keys(self, capsys):
        """Test the keys listing."""
        args = build_parser().parse_args(["keys", "--image-key", "tenant-42/abc123"])

        assert run_keys(args) == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 9
        assert lines[0] == "640w-avif-q50\ttenant-42/abc123-640w-avif-q50-v1.avif"
        assert lines[-1] == "1920w-jpeg-q80\ttenant-42/abc123-1920w-jpeg-q80-v1.jpg"

    def test_run_keys_invalid(self):
        """Test that run_keys validates the image key."""
        args = build_parser().parse_args(["keys", "--image-key", "tenant-42"])
        with pytest.raises(InvalidImageKeyError):
            run_keys(args)
