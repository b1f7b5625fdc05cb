"""
Tests for the command-line client.
"""

from unittest.mock import AsyncMock, patch

import pytest

from client.cli import build_parser, main
from core.errors import DuplicateVoteError


@pytest.mark.unit
class TestCli:
    def test_parses_vote_command(self) -> None:
        args = build_parser().parse_args(["--storage", "/tmp/x.json", "vote", "group-1", "5"])

        assert args.command == "vote"
        assert args.group_id == "group-1"
        assert args.score == 5
        assert args.storage == "/tmp/x.json"

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_whoami_prints_device_id(self, tmp_path, capsys) -> None:
        storage = str(tmp_path / "client.json")

        assert main(["--storage", storage, "whoami"]) == 0
        first = capsys.readouterr().out.strip()
        assert main(["--storage", storage, "whoami"]) == 0
        assert capsys.readouterr().out.strip() == first
        assert first.startswith("device-")

    def test_errors_exit_with_status_one(self, tmp_path, capsys) -> None:
        with patch("client.cli.VotingClient.submit_vote", new=AsyncMock(side_effect=DuplicateVoteError())):
            code = main(["--storage", str(tmp_path / "client.json"), "vote", "group-1", "3"])

        assert code == 1
        assert "Error: You have already voted for this group" in capsys.readouterr().err
