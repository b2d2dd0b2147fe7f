"""Shared fixtures for the maple_admin test suite."""

import json
import logging
import os
from unittest.mock import Mock

import pytest
import requests

from maple_admin.config import settings as settings_module
from maple_admin.utils import logger as logger_module

_ENV_PREFIXES = ("MAPLE_", "USE_LOCAL_SECRETS", "LOCAL_SECRETS", "AWS_REGION")


@pytest.fixture(autouse=True)
def cleanup_env():
    """Remove configuration env vars set by a test."""
    yield
    for key in list(os.environ.keys()):
        if key.startswith(_ENV_PREFIXES):
            os.environ.pop(key, None)


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Undo --verbose and redaction filters registered during a test."""
    root_filters = list(logging.getLogger().filters)
    yield
    for handler in logger_module._maple_handlers():
        for log_filter in list(logger_module._HANDLER_FILTERS):
            handler.removeFilter(log_filter)
        handler.setLevel(logging.WARNING)
    logger_module._HANDLER_FILTERS.clear()
    logger_module._HANDLER_LEVEL = None
    root = logging.getLogger()
    redaction_filter = settings_module._redaction_filter
    if redaction_filter is not None:
        for handler in root.handlers:
            handler.removeFilter(redaction_filter)
    settings_module._redaction_filter = None
    for log_filter in list(root.filters):
        if log_filter not in root_filters:
            root.removeFilter(log_filter)


@pytest.fixture
def aws_credentials():
    """Fixture for AWS credentials."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "ap-south-1"


def make_response(payload=None, status_code=200, text=None):
    """Build a Mock requests.Response carrying a JSON payload."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    if payload is None and text is None:
        response.content = b""
        response.text = ""
        response.json.side_effect = ValueError("No JSON object could be decoded")
    elif text is not None:
        response.content = text.encode("utf-8")
        response.text = text
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        body = json.dumps(payload)
        response.content = body.encode("utf-8")
        response.text = body
        response.json.return_value = payload

    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def http_session():
    """A requests.Session double; set .request.return_value / side_effect per test."""
    return Mock(spec=requests.Session)


@pytest.fixture
def response_factory():
    """Expose make_response to tests."""
    return make_response
