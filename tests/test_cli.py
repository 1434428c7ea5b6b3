import json
import logging
from pathlib import Path
from typing import Any

import pytest
import requests

from emailable_verifier import cli
from emailable_verifier.errors import UpstreamBusyError
from emailable_verifier.models import (
    BatchRequest,
    BatchResponse,
    BatchStatusRequest,
    BatchStatusResponse,
    VerifyRequest,
    VerifyResponse,
)


class StubClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.verify_requests: list[VerifyRequest] = []
        self.batches: list[BatchRequest] = []
        self.status_requests: list[BatchStatusRequest] = []

    def __enter__(self) -> "StubClient":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        return None

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        if self.error:
            raise self.error
        self.verify_requests.append(request)
        return VerifyResponse(email=request.email, state="deliverable", score=99)

    def new_batch_request(self, emails: Any) -> BatchRequest:
        return BatchRequest(emails=tuple(emails))

    def batch_verify(self, request: BatchRequest) -> BatchResponse:
        self.batches.append(request)
        return BatchResponse(message="Batch started", id=f"b-{len(self.batches)}")

    def new_batch_status_request(self, batch_id: str) -> BatchStatusRequest:
        return BatchStatusRequest(id=batch_id)

    def batch_status(self, request: BatchStatusRequest) -> BatchStatusResponse:
        self.status_requests.append(request)
        return BatchStatusResponse(
            message="done",
            processed=1,
            total=1,
            id=request.id,
            emails=(VerifyResponse(email="a@corp.io", state="deliverable"),),
        )


@pytest.fixture
def stub(monkeypatch: pytest.MonkeyPatch) -> StubClient:
    client = StubClient()
    monkeypatch.setattr(cli, "make_client", lambda config, logger: client)
    monkeypatch.setenv("EMAILABLE_API_KEY", "env-key")
    return client


def test_parse_args_verify() -> None:
    args = cli.parse_args(["verify", "a@corp.io", "--smtp", "--timeout", "12"])
    assert (args.command, args.email, args.smtp, args.accept_all, args.timeout) == (
        "verify",
        "a@corp.io",
        True,
        False,
        12,
    )


def test_parse_args_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_namespace_to_config_prefers_flag_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EMAILABLE_API_KEY", "env-key")
    config = cli.namespace_to_config(cli.parse_args(["--api-key", "flag-key", "status", "b-1"]))
    assert config.api_key == "flag-key"
    config = cli.namespace_to_config(cli.parse_args(["batch", "in.txt", "--chunk-size", "10"]))
    assert (config.api_key, config.chunk_size) == ("env-key", 10)


def test_main_returns_two_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EMAILABLE_API_KEY", raising=False)
    assert cli.main(["verify", "a@corp.io"]) == 2


def test_main_verify_prints_json(stub: StubClient, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["verify", "a@corp.io", "--accept-all"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["email"] == "a@corp.io"
    assert stub.verify_requests[0].accept_all is True


def test_main_verify_busy_returns_one(
    stub: StubClient, caplog: pytest.LogCaptureFixture
) -> None:
    stub.error = UpstreamBusyError()
    with caplog.at_level(logging.ERROR):
        assert cli.main(["verify", "a@corp.io"]) == 1
    assert "send it again later" in caplog.text


def test_main_transport_error_returns_one(stub: StubClient) -> None:
    stub.error = requests.ConnectionError("network down")
    assert cli.main(["verify", "a@corp.io"]) == 1


def test_main_batch_submits_file(
    stub: StubClient, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "emails.txt"
    source.write_text("a@corp.io\nnope\nb@corp.io\nc@corp.io\n", encoding="utf-8")

    assert cli.main(["--no-progress", "batch", str(source), "--chunk-size", "2"]) == 0

    assert [request.emails for request in stub.batches] == [
        ("a@corp.io", "b@corp.io"),
        ("c@corp.io",),
    ]
    assert capsys.readouterr().out.splitlines() == ["b-1\tBatch started", "b-2\tBatch started"]


def test_main_batch_missing_file_returns_one(stub: StubClient, tmp_path: Path) -> None:
    assert cli.main(["batch", str(tmp_path / "missing.txt")]) == 1


def test_main_status_writes_csv(
    stub: StubClient, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "results.csv"

    assert cli.main(["status", "b-7", "--partial", "--output", str(output)]) == 0

    assert stub.status_requests[0].partial is True
    summary = json.loads(capsys.readouterr().out)
    assert summary["id"] == "b-7"
    assert "emails" not in summary
    assert "a@corp.io" in output.read_text(encoding="utf-8")


def test_main_batch_skips_latin1_line(
    stub: StubClient, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "emails.txt"
    source.write_bytes(b"a@corp.io\nj\xe9r\xf4me@corp.io\nb@corp.io\n")

    assert cli.main(["--no-progress", "batch", str(source)]) == 0

    assert [request.emails for request in stub.batches] == [("a@corp.io", "b@corp.io")]
    assert capsys.readouterr().out.splitlines() == ["b-1\tBatch started"]
