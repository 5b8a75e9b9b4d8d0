"""
Tests for the vRealize Automation API client.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from vro_docs.exceptions import (
    MissingCredentialsError,
    RetryableError,
    VraAuthenticationError,
    VraExecutionError,
)
from vro_docs.vra import (
    DEFAULT_RUNNER_WORKFLOW_ID,
    LOGIN_PATH,
    TOKEN_PATH,
    VraClient,
    credentials_from_env,
    string_parameter,
    trigger_documentation_run,
)

BASE_URL = "https://vra.example.com"


def response(status_code=200, body=None, headers=None):
    """Build a fake requests.Response."""
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    if body is None:
        resp.text = ""
        resp.json.side_effect = ValueError("no body")
    elif isinstance(body, str):
        resp.text = body
        resp.json.side_effect = ValueError("not json")
    else:
        resp.text = json.dumps(body)
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    client = VraClient(BASE_URL + "/", session=session)
    client.bearer_token = "bearer-1"
    return client


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("vro_docs.util.retry.time.sleep") as sleep:
        yield sleep


class TestCredentials:
    """Tests for credentials_from_env()."""

    def test_all_from_env(self, monkeypatch):
        monkeypatch.setenv("VRA_URL", BASE_URL)
        monkeypatch.setenv("VRA_USER", "svc-ci")
        monkeypatch.setenv("VRA_PASSWORD", "secret")

        creds = credentials_from_env()

        assert creds.url == BASE_URL
        assert creds.username == "svc-ci"
        assert "secret" not in repr(creds)

    def test_url_from_config(self, monkeypatch):
        monkeypatch.delenv("VRA_URL", raising=False)
        monkeypatch.setenv("VRA_USER", "svc-ci")
        monkeypatch.setenv("VRA_PASSWORD", "secret")

        assert credentials_from_env("https://configured").url == "https://configured"

    def test_missing(self, monkeypatch):
        for name in ("VRA_URL", "VRA_USER", "VRA_PASSWORD"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(MissingCredentialsError) as exc_info:
            credentials_from_env()

        assert "VRA_URL, VRA_USER, VRA_PASSWORD" in exc_info.value.message


class TestAuthentication:
    """Tests for login and token exchange."""

    def test_authenticate(self, session):
        session.post.side_effect = [
            response(200, {"refresh_token": "refresh-1"}),
            response(200, {"token": "bearer-1", "tokenType": "Bearer"}),
        ]
        client = VraClient(BASE_URL, session=session)

        client.authenticate("svc-ci", "secret")

        assert client.bearer_token == "bearer-1"
        login_call, token_call = session.post.call_args_list
        assert login_call.args[0] == BASE_URL + LOGIN_PATH
        assert login_call.kwargs["json"] == {"username": "svc-ci", "password": "secret"}
        assert login_call.kwargs["verify"] is True
        assert token_call.args[0] == BASE_URL + TOKEN_PATH
        assert token_call.kwargs["json"] == {"refreshToken": "refresh-1"}

    def test_verify_ssl_disabled(self, session):
        session.post.return_value = response(200, {"refresh_token": "r"})
        client = VraClient(BASE_URL, verify_ssl=False, timeout=5, session=session)

        client.login("svc-ci", "secret")

        assert session.post.call_args.kwargs["verify"] is False
        assert session.post.call_args.kwargs["timeout"] == 5

    def test_login_rejected_redacts_body(self, session):
        session.post.return_value = response(401, '{"password": "secret", "error": "denied"}')
        client = VraClient(BASE_URL, session=session)

        with pytest.raises(VraAuthenticationError) as exc_info:
            client.login("svc-ci", "secret")

        assert "code 401" in exc_info.value.message
        assert "secret" not in exc_info.value.message

    def test_login_without_token(self, session):
        session.post.return_value = response(200, {"something": "else"})
        client = VraClient(BASE_URL, session=session)

        with pytest.raises(VraAuthenticationError, match="refresh_token"):
            client.login("svc-ci", "secret")

    def test_token_exchange_not_json(self, session):
        session.post.return_value = response(200, "<html>proxy</html>")
        client = VraClient(BASE_URL, session=session)

        with pytest.raises(VraAuthenticationError, match="not JSON"):
            client.get_bearer_token("refresh-1")

    def test_connection_error(self, session):
        session.post.side_effect = requests.ConnectionError("connection refused")
        client = VraClient(BASE_URL, session=session)

        with pytest.raises(VraAuthenticationError, match="connection refused"):
            client.login("svc-ci", "secret")


class TestExecuteWorkflow:
    """Tests for execute_workflow()."""

    def test_success(self, client, session):
        session.post.return_value = response(202, {"id": "exec-1", "state": "running"})

        execution = client.execute_workflow("wf-1", [string_parameter("a", "b")])

        assert execution.status_code == 202
        assert execution.execution_id == "exec-1"
        assert execution.state == "running"
        assert execution.attempts == 1
        call = session.post.call_args
        assert call.args[0] == f"{BASE_URL}/vco/api/workflows/wf-1/executions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer bearer-1"
        assert call.kwargs["json"] == {
            "parameters": [{"name": "a", "type": "string", "value": {"string": {"value": "b"}}}]
        }

    def test_execution_id_from_location(self, client, session):
        session.post.return_value = response(
            202, headers={"Location": f"{BASE_URL}/vco/api/workflows/wf-1/executions/exec-9/"}
        )

        execution = client.execute_workflow("wf-1", [])

        assert execution.execution_id == "exec-9"
        assert execution.body == {}

    def test_retries_until_success(self, client, session, no_sleep):
        session.post.side_effect = [
            response(500, "busy"),
            requests.ConnectionError("reset"),
            response(202, {"id": "exec-3"}),
        ]

        execution = client.execute_workflow("wf-1", [], attempts=3, delay=5.0)

        assert execution.attempts == 3
        assert execution.execution_id == "exec-3"
        assert [c.args[0] for c in no_sleep.call_args_list] == [5.0, 5.0]

    def test_gives_up_after_attempts(self, client, session, no_sleep):
        session.post.return_value = response(400, "bad request")

        with pytest.raises(RetryableError) as exc_info:
            client.execute_workflow("wf-1", [], attempts=3, delay=5.0)

        assert session.post.call_count == 3
        assert no_sleep.call_count == 2
        assert isinstance(exc_info.value.original_error, VraExecutionError)
        assert exc_info.value.original_error.status_code == 400

    def test_requires_authentication(self, session):
        client = VraClient(BASE_URL, session=session)

        with pytest.raises(VraAuthenticationError, match="not authenticated"):
            client.execute_workflow("wf-1", [])

        session.post.assert_not_called()


class TestTriggerDocumentationRun:
    def test_runner_parameters(self, client, session):
        session.post.return_value = response(202, {"id": "exec-1"})

        trigger_documentation_run(client, "wf-1", "feature/avi")

        call = session.post.call_args
        assert DEFAULT_RUNNER_WORKFLOW_ID in call.args[0]
        assert call.kwargs["json"]["parameters"] == [
            string_parameter("workflowID", "wf-1"),
            string_parameter("branchName", "feature/avi"),
        ]

    def test_custom_runner(self, client, session):
        session.post.return_value = response(202, {"id": "exec-1"})

        trigger_documentation_run(client, "wf-1", "main", runner_workflow_id="runner-2")

        assert "/workflows/runner-2/executions" in session.post.call_args.args[0]
