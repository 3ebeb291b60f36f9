"""
Tests for the ballot-stats command line.
"""

import json
import logging

import pytest
from rich.console import Console
from typer.testing import CliRunner

from ballot_stats.core.errors import ConfigError
from ballot_stats.core.events import RawEvent
from ballot_stats_cli.commands import count
from ballot_stats_cli.main import app
from ballot_stats_cli.period import parse_period

from .builders import (
    A,
    B,
    CONSENSUS,
    KEYS_V2,
    METADATA_V2,
    ROGUE,
    VOTING_V2,
    ballot_created,
    change_finalized,
    clock_at,
    enrich_all,
    key_change,
    make_chain,
    vote,
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def contracts_file(tmp_path):
    path = tmp_path / "core.json"
    path.write_text(
        json.dumps(
            {
                "v2": {
                    "VOTING_TO_CHANGE_KEYS_ADDRESS": str(VOTING_V2),
                    "KEYS_MANAGER_ADDRESS": str(KEYS_V2),
                    "METADATA_ADDRESS": str(METADATA_V2),
                    "POA_NETWORK_CONSENSUS_ADDRESS": str(CONSENSUS),
                }
            }
        )
    )
    return str(path)


@pytest.fixture
def chain(monkeypatch):
    chain = make_chain([
        change_finalized(1, [A, B]),
        change_finalized(2, [A], contract=ROGUE),
        ballot_created(3, 1),
        vote(4, 1, A),
        ballot_created(5, 2),
    ])
    enrich_all(chain, [A, B])
    monkeypatch.setattr(count, "connect_chain", lambda url: chain)
    monkeypatch.setattr(count, "clock", clock_at(chain.latest_block()))
    return chain


def test_count_json(chain, contracts_file):
    result = runner.invoke(app, ["count", "-c", contracts_file, "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["success"] is True
    assert data["ballots"] == 2
    assert data["events_applied"] == 3
    assert data["events_dropped"] == 1
    assert data["node_stale"] is False
    assert [v["voting_address"] for v in data["voters"]] == [str(B), str(A)]
    assert data["voters"][0]["missed"] == 2
    assert data["voters"][1]["name"] == "Val0a Idator"
    assert len(data["digest"]) == 64


def test_count_block_filter(chain, contracts_file):
    result = runner.invoke(app, ["count", "-c", contracts_file, "--block", "4", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["ballots"] == 1
    assert data["skipped_ballots"] == 1


def test_count_table(chain, contracts_file, monkeypatch):
    monkeypatch.setattr(count, "console", Console(width=200))
    result = runner.invoke(app, ["count", "-c", contracts_file])

    assert result.exit_code == 0
    assert "2/2" in result.stdout
    assert "Val0b Idator" in result.stdout


def test_count_missing_contracts_file(chain, tmp_path):
    result = runner.invoke(app, ["count", "-c", str(tmp_path / "nope.json"), "--json"])

    assert result.exit_code == 2
    data = json.loads(result.stdout)
    assert data["type"] == "ConfigError"
    assert "contracts file not found" in data["error"]


def test_count_bad_period(chain, contracts_file):
    result = runner.invoke(app, ["count", "-c", contracts_file, "--period", "soon", "--json"])

    assert result.exit_code == 2
    assert json.loads(result.stdout)["type"] == "ConfigError"


def test_count_undecodable_log_exits_with_error(chain, contracts_file):
    raw = key_change(6, B)
    data = bytearray(raw.data)
    data[64:96] = (2**255).to_bytes(32, "big")
    chain.add_log(RawEvent(block_number=5, address=raw.address, topics=raw.topics, data=bytes(data), log_index=1))

    result = runner.invoke(app, ["count", "-c", contracts_file, "--json"])

    assert result.exit_code == 2
    assert json.loads(result.stdout)["type"] == "UnrecognizedEventError"


def test_events_json(chain, contracts_file):
    result = runner.invoke(app, ["events", "-c", contracts_file, "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["count"] == 4
    assert data["dropped"] == 1
    assert [e["type"] for e in data["events"]] == ["FullSetReplace", None, "BallotCreated", "BallotCreated"]
    assert data["events"][1]["summary"] == "dropped"


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "ballot-stats CLI" in result.stdout


def test_parse_period():
    assert parse_period("5 days") == 5 * 86400
    assert parse_period("2 months 3 days") == 63 * 86400
    assert parse_period("1 year") == 365 * 86400
    assert parse_period("90s") == 90


@pytest.mark.parametrize("text", ["", "soon", "5", "3 fortnights", "5 days later"])
def test_parse_period_rejects(text):
    with pytest.raises(ConfigError):
        parse_period(text)
