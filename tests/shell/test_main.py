"""Tests for the process entry point."""

from unittest.mock import patch

from stormrelay.main import main, parse_args
from stormrelay.orchestrator import StartupError


VALID_YAML = """
mesh:
  device: /dev/ttyACM0
channels:
  alerts:
    name: ARES
"""

INVALID_YAML = """
storm:
  threshold: 0
"""


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestParseArgs:
    """Tests for parse_args()."""

    def test_defaults(self):
        args = parse_args([])

        assert args.device is None
        assert args.config is None
        assert args.host is None
        assert args.check is False

    def test_device_and_options(self):
        args = parse_args(["/dev/ttyUSB0", "--host", "radio.local", "--check"])

        assert args.device == "/dev/ttyUSB0"
        assert args.host == "radio.local"
        assert args.check is True


class TestMain:
    """Tests for main()."""

    def test_check_valid_config(self, tmp_path):
        assert main(["--check", "--config", write_config(tmp_path, VALID_YAML)]) == 0

    def test_invalid_config_exits_2(self, tmp_path):
        assert main(["--check", "--config", write_config(tmp_path, INVALID_YAML)]) == 2

    def test_invalid_config_never_starts(self, tmp_path):
        with patch("stormrelay.main.Orchestrator") as orchestrator_cls:
            code = main(["--config", write_config(tmp_path, INVALID_YAML)])

        assert code == 2
        orchestrator_cls.assert_not_called()

    def test_device_argument_overrides_config(self, tmp_path):
        with patch("stormrelay.main.Orchestrator") as orchestrator_cls:
            main(["/dev/ttyUSB1", "--config", write_config(tmp_path, VALID_YAML)])

        config = orchestrator_cls.call_args.args[0]
        assert config.mesh.device == "/dev/ttyUSB1"

    def test_startup_error_exits_1(self, tmp_path):
        with patch("stormrelay.main.Orchestrator") as orchestrator_cls:
            orchestrator = orchestrator_cls.return_value
            orchestrator.run_forever.side_effect = StartupError("Channel ARES not found!")

            code = main(["--config", write_config(tmp_path, VALID_YAML)])

        assert code == 1
        orchestrator.stop.assert_called_once()
