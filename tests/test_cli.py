from typer.testing import CliRunner

import cli
from livegraph.core.exceptions import TransportError
from livegraph.models.graph import Edge, GraphSnapshot, Vertex

runner = CliRunner()


class StubTransport:
    def __init__(self, replies):
        self.replies = list(replies)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def fetch_snapshot(self):
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def _install(monkeypatch, *replies):
    stub = StubTransport(replies)
    monkeypatch.setattr(cli, "TransportClient", lambda **kwargs: stub)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return stub


def test_snapshot_prints_counts(monkeypatch):
    _install(monkeypatch, GraphSnapshot(
        vertices=[Vertex(id="a"), Vertex(id="b")],
        edges=[Edge(source="a", target="b")],
    ))

    result = runner.invoke(cli.cli_app, ["snapshot"])

    assert result.exit_code == 0
    assert "2 vertices, 1 edges" in result.output


def test_snapshot_reports_transport_failure(monkeypatch):
    _install(monkeypatch, TransportError("connection refused"))

    result = runner.invoke(cli.cli_app, ["snapshot"])

    assert result.exit_code == 1
    assert "connection refused" in result.output


def test_poll_runs_requested_cycles(monkeypatch):
    _install(
        monkeypatch,
        GraphSnapshot(vertices=[Vertex(id="a")]),
        TransportError("down"),
        GraphSnapshot(vertices=[Vertex(id="a"), Vertex(id="b")], edges=[Edge(source="a", target="b")]),
    )

    result = runner.invoke(cli.cli_app, ["poll", "--cycles", "3", "--interval-ms", "1"])

    assert result.exit_code == 0
    assert "Poll 3 (version 2)" in result.output
    assert "2 vertices, 1 edges after 3 polls" in result.output


def test_poll_rejects_unknown_mode(monkeypatch):
    _install(monkeypatch)

    result = runner.invoke(cli.cli_app, ["poll", "--mode", "stream"])

    assert result.exit_code == 2
