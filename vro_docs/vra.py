"""
vRealize Automation API client.

Authenticates against the vRA appliance and starts vRealize Orchestrator
workflow executions. Used by CI to ask a runner workflow on the appliance to
regenerate documentation for a changed workflow.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import requests

from vro_docs.exceptions import (
    MissingCredentialsError,
    VraAuthenticationError,
    VraExecutionError,
)
from vro_docs.util.redact import redact_sensitive
from vro_docs.util.retry import retry_with_backoff

logger = logging.getLogger(__name__)

LOGIN_PATH = "/csp/gateway/am/api/login?access_token"
TOKEN_PATH = "/iaas/api/login"
EXECUTIONS_PATH = "/vco/api/workflows/{workflow_id}/executions"

DEFAULT_RUNNER_WORKFLOW_ID = "d8a3ea33-868f-43f4-bed1-df4404b0cedb"
DEFAULT_TIMEOUT = 30.0
DEFAULT_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 5.0

ENV_URL = "VRA_URL"
ENV_USER = "VRA_USER"
ENV_PASSWORD = "VRA_PASSWORD"


@dataclass
class VraCredentials:
    url: str
    username: str
    password: str = field(repr=False)


@dataclass
class Execution:
    """Accepted workflow execution request."""

    workflow_id: str
    status_code: int
    attempts: int
    execution_id: str | None = None
    state: str | None = None
    body: dict[str, Any] = field(default_factory=dict)


def string_parameter(name: str, value: str) -> dict[str, Any]:
    """Build a vRO string input parameter."""
    return {
        "name": name,
        "type": "string",
        "value": {"string": {"value": value}},
    }


def credentials_from_env(url: str | None = None) -> VraCredentials:
    """
    Read connection settings from ``VRA_URL``, ``VRA_USER`` and ``VRA_PASSWORD``.

    Args:
        url: URL from configuration, used when ``VRA_URL`` is not set

    Raises:
        MissingCredentialsError: Naming every missing setting
    """
    values = {
        ENV_URL: os.environ.get(ENV_URL) or url,
        ENV_USER: os.environ.get(ENV_USER),
        ENV_PASSWORD: os.environ.get(ENV_PASSWORD),
    }
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise MissingCredentialsError(missing)

    return VraCredentials(
        url=values[ENV_URL],
        username=values[ENV_USER],
        password=values[ENV_PASSWORD],
    )


class VraClient:
    """
    Minimal vRA REST client.

    Example:
        >>> client = VraClient("https://vra.example.com", verify_ssl=False)
        >>> client.authenticate("svc-ci", os.environ["VRA_PASSWORD"])
        >>> client.execute_workflow(workflow_id, [string_parameter("branchName", "main")])
    """

    def __init__(
        self,
        base_url: str,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.session = session or requests.Session()
        self.bearer_token: str | None = None

        if not verify_ssl:
            logger.warning(f"TLS certificate verification disabled for {self.base_url}")

    def _post(
        self, path: str, payload: dict[str, Any], headers: dict[str, str] | None = None
    ) -> requests.Response:
        return self.session.post(
            f"{self.base_url}{path}",
            json=payload,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=self.timeout,
            verify=self.verify_ssl,
        )

    def _auth_json(self, step: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._post(path, payload)
        except requests.RequestException as e:
            raise VraAuthenticationError(step, redact_sensitive(str(e))) from e

        if not 200 <= response.status_code < 300:
            body = redact_sensitive(response.text)
            raise VraAuthenticationError(step, f"code {response.status_code}: {body}")

        try:
            data = response.json()
        except ValueError as e:
            raise VraAuthenticationError(step, "response is not JSON") from e

        if not isinstance(data, dict):
            raise VraAuthenticationError(step, "unexpected response body")
        return data

    def login(self, username: str, password: str) -> str:
        """
        Exchange user credentials for a refresh token.

        Raises:
            VraAuthenticationError: If the request fails or returns no token
        """
        data = self._auth_json("login", LOGIN_PATH, {"username": username, "password": password})
        token = data.get("refresh_token")
        if not token:
            raise VraAuthenticationError("login", "response has no refresh_token")
        logger.debug("Obtained refresh token")
        return str(token)

    def get_bearer_token(self, refresh_token: str) -> str:
        """
        Exchange a refresh token for an API bearer token.

        Raises:
            VraAuthenticationError: If the request fails or returns no token
        """
        data = self._auth_json("token exchange", TOKEN_PATH, {"refreshToken": refresh_token})
        token = data.get("token")
        if not token:
            raise VraAuthenticationError("token exchange", "response has no token")
        logger.debug("Obtained bearer token")
        return str(token)

    def authenticate(self, username: str, password: str) -> None:
        """Log in and keep the bearer token for later calls."""
        self.bearer_token = self.get_bearer_token(self.login(username, password))

    def execute_workflow(
        self,
        workflow_id: str,
        parameters: list[dict[str, Any]],
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY,
    ) -> Execution:
        """
        Start a workflow execution, retrying failed attempts.

        Any non-2xx response or connection error counts as a failed attempt.
        Attempts are spaced ``delay`` seconds apart.

        Args:
            workflow_id: Workflow to run
            parameters: vRO input parameters (see ``string_parameter``)
            attempts: Maximum number of attempts
            delay: Seconds between attempts

        Returns:
            The accepted Execution

        Raises:
            VraAuthenticationError: If ``authenticate`` was not called
            RetryableError: After the last failed attempt; wraps the final error
        """
        if not self.bearer_token:
            raise VraAuthenticationError("execution", "not authenticated")

        path = EXECUTIONS_PATH.format(workflow_id=workflow_id)
        payload = {"parameters": parameters}
        headers = {"Authorization": f"Bearer {self.bearer_token}"}
        attempt_count = 0

        def on_retry(error: Exception, attempt: int, max_attempts: int) -> None:
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({redact_sensitive(str(error))}), "
                f"retrying in {delay:g}s..."
            )

        @retry_with_backoff(
            max_attempts=attempts,
            initial_delay=delay,
            backoff_factor=1.0,
            retryable_exceptions=(VraExecutionError, requests.RequestException),
            on_retry=on_retry,
        )
        def start() -> Execution:
            nonlocal attempt_count
            attempt_count += 1
            logger.info(f"Attempt {attempt_count}: triggering vRO workflow {workflow_id}")

            response = self._post(path, payload, headers)
            body = redact_sensitive(response.text or "")
            logger.info(f"vRO API response code: {response.status_code}")
            logger.info(f"vRO API response body: {body}")

            if not 200 <= response.status_code < 300:
                raise VraExecutionError(workflow_id, response.status_code, body)

            logger.info(f"Success on attempt {attempt_count}")
            return self._execution_from_response(workflow_id, response, attempt_count)

        return start()

    @staticmethod
    def _execution_from_response(
        workflow_id: str, response: requests.Response, attempts: int
    ) -> Execution:
        data: dict[str, Any] = {}
        if response.text:
            try:
                parsed = response.json()
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                data = parsed

        execution_id = data.get("id")
        location = response.headers.get("Location") if response.headers else None
        if not execution_id and location:
            execution_id = location.rstrip("/").rsplit("/", 1)[-1]

        return Execution(
            workflow_id=workflow_id,
            status_code=response.status_code,
            attempts=attempts,
            execution_id=execution_id,
            state=data.get("state"),
            body=data,
        )


def trigger_documentation_run(
    client: VraClient,
    workflow_id: str,
    branch: str,
    runner_workflow_id: str = DEFAULT_RUNNER_WORKFLOW_ID,
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
) -> Execution:
    """
    Ask the runner workflow to document ``workflow_id`` from ``branch``.

    The runner receives two string inputs, ``workflowID`` and ``branchName``.
    """
    parameters = [
        string_parameter("workflowID", workflow_id),
        string_parameter("branchName", branch),
    ]
    return client.execute_workflow(runner_workflow_id, parameters, attempts=attempts, delay=delay)
