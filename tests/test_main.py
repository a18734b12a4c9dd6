"""Tests for command-line parsing and the handshake request it builds."""

import pytest

from src.main import build_parser, build_request, parse_address
from src.networking.protocol import Role


class TestParseAddress:
    def test_host_and_port(self):
        assert parse_address("127.0.0.1:8384") == ("127.0.0.1", 8384)

    def test_missing_port_raises(self):
        with pytest.raises(ValueError):
            parse_address("localhost")


class TestArguments:
    def test_host_request_defaults_to_white(self):
        args = build_parser().parse_args(["--host", "8384", "--time", "300", "--inc", "5"])
        request = build_request(args, Role.HOST)
        assert request.wants_white
        assert (request.time, request.inc) == (300, 5)

    def test_joiner_request_ignores_host_options(self):
        args = build_parser().parse_args(["--join", "h:1", "--name", "bob"])
        request = build_request(args, Role.JOIN)
        assert request.name == "bob"
        assert request.fen is None

    @pytest.mark.parametrize("argv", [
        ["--host", "8384", "--time", "-1"],
        ["--host", "8384", "--inc", str(2**32)],
        ["--host", "8384", "--time", "soon"],
        ["--host", "8384", "--name", "x" * 65],
        ["--host", "8384", "--name", ""],
    ])
    def test_out_of_range_values_exit_with_usage_error(self, argv, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(argv)
        assert exc.value.code == 2
        assert "error" in capsys.readouterr().err
