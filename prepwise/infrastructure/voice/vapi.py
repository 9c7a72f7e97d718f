"""
Server-side client for starting voice workflow calls over the Vapi REST API.
"""
import logging
from typing import Any, Dict, Optional

import requests

from ...config import VAPI_BASE_URL, VAPI_TIMEOUT
from ...errors import ConfigurationError, TransportError

logger = logging.getLogger("vapi_client")


class VapiRestClient:
    """Starts workflow calls with the secret key kept on the server."""

    def __init__(self,
                 secret_key: Optional[str],
                 workflow_id: Optional[str],
                 base_url: str = VAPI_BASE_URL,
                 timeout: int = VAPI_TIMEOUT):
        self.secret_key = secret_key
        self.workflow_id = workflow_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def start_workflow_call(self, variable_values: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Start a web call running the configured workflow.

        Args:
            variable_values: Workflow variables (e.g. username, userid)

        Returns:
            The call object returned by the API

        Raises:
            ConfigurationError: If the workflow id or secret key is missing
            TransportError: If the API rejects the call or cannot be reached
        """
        if not self.workflow_id or not self.secret_key:
            raise ConfigurationError("Voice workflow credentials not configured")

        body = {
            "workflowId": self.workflow_id,
            "type": "webCall",
            "workflowOverrides": {
                "variableValues": variable_values or {},
            },
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.secret_key}",
        }

        logger.info(f"Starting voice workflow {self.workflow_id}")
        logger.debug(f"Workflow variables: {variable_values}")

        try:
            resp = requests.post(f"{self.base_url}/call", headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Voice API request failed: {e}") from e

        if resp.status_code >= 400:
            raise TransportError(f"Voice API error {resp.status_code}: {resp.text}")

        data = resp.json()
        logger.info(f"Voice workflow call started: {data.get('id')}")
        return data
