"""
Configuration loader for the Maple Tours admin client.

Reads API and session settings from the environment, admin credentials from
the environment, a local secrets file or AWS Secrets Manager (with
exponential backoff), and the admin settings page from YAML validated
against a JSON schema.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import boto3
import jsonschema
import yaml
from botocore.exceptions import ClientError

from ..utils.logger import register_handler_filter

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


# NOTE: This is a secret NAME, not a secret VALUE.
ADMIN_SECRET_ID = "maple-admin/admin-credentials"  # nosec B105

DEFAULT_API_BASE_URL = "https://maple-server-e7ye.onrender.com/api"
DEFAULT_API_TIMEOUT = 10.0
DEFAULT_REGION = "ap-south-1"
DEFAULT_ADMIN_HOME = "~/.maple-admin"

AUTH_MODE_REMOTE = "remote"
AUTH_MODE_LOCAL = "local"
AUTH_MODES = (AUTH_MODE_REMOTE, AUTH_MODE_LOCAL)

SESSION_FILE_NAME = "session.json"
ADMIN_SETTINGS_FILE_NAME = "settings.yaml"
ADMIN_SETTINGS_SCHEMA_PATH = Path(__file__).resolve().parent / "admin_settings.schema.json"


def _use_local_secrets() -> bool:
    return os.getenv("USE_LOCAL_SECRETS_FILE", "false").lower() == "true"


def _local_secrets_file() -> str:
    return os.getenv("LOCAL_SECRETS_FILE_PATH", ".local/secrets.json")


@dataclass
class AdminSettings:
    """Values edited on the admin settings page."""

    admin_email: Optional[str] = None
    send_booking_confirmations: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SecretRedactionFilter(logging.Filter):
    """
    Logging filter that redacts secret values from log records.
    Replaces secret substrings with ***REDACTED*** to prevent accidental leakage.
    """

    def __init__(self, secrets: Optional[Dict[str, Any]] = None):
        """
        Initialize filter with secrets to redact.

        Args:
            secrets: Dictionary of secrets to redact (values will be masked)
        """
        super().__init__()
        self.secrets = secrets or {}
        self.redacted_values: set[str] = set()
        if self.secrets:
            self._extract_secret_values(self.secrets)

    def add_secret(self, value: Any) -> None:
        """Register more values (a freshly issued token or a dict of secrets) for redaction."""
        if value:
            self._extract_secret_values(value)

    def _extract_secret_values(self, obj: Any, max_depth: int = 5) -> None:
        """Recursively extract all secret values from nested structures."""
        if max_depth <= 0:
            return

        if isinstance(obj, dict):
            for value in obj.values():
                self._extract_secret_values(value, max_depth - 1)
        elif isinstance(obj, (list, tuple)):
            for item in obj:
                self._extract_secret_values(item, max_depth - 1)
        elif isinstance(obj, str) and obj and len(obj) > 3:
            # Only redact strings with meaningful length
            self.redacted_values.add(obj)

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and redact log record."""
        try:
            record.msg = self._redact_string(str(record.msg))
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: self._redact_string(str(v)) for k, v in record.args.items()}
                elif isinstance(record.args, (list, tuple)):
                    record.args = tuple(self._redact_string(str(arg)) for arg in record.args)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Error during secret redaction: {e}")
        return True

    def _redact_string(self, text: str) -> str:
        """Redact all secret values from string."""
        for secret in self.redacted_values:
            if secret in text:
                text = text.replace(secret, "***REDACTED***")
        return text


class Settings:
    """
    Runtime configuration for the admin client.

    API location, auth mode and the on-disk session directory come from the
    environment. Credentials are fetched lazily, only when local-mode login
    needs them.
    """

    def __init__(self, region_name: Optional[str] = None):
        """
        Initialize Settings loader.

        Args:
            region_name: AWS region for Secrets Manager (AWS_REGION if None)
        """
        self.region_name = region_name or os.getenv("AWS_REGION", DEFAULT_REGION)
        self.api_base_url = os.getenv("MAPLE_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")
        self.api_timeout = self._read_timeout()
        self.auth_mode = os.getenv("MAPLE_AUTH_MODE", AUTH_MODE_REMOTE).lower()
        if self.auth_mode not in AUTH_MODES:
            raise ConfigurationError(
                f"MAPLE_AUTH_MODE must be one of {AUTH_MODES}, got '{self.auth_mode}'"
            )
        self.admin_home = Path(os.getenv("MAPLE_ADMIN_HOME", DEFAULT_ADMIN_HOME)).expanduser()

    @property
    def token_path(self) -> Path:
        return self.admin_home / SESSION_FILE_NAME

    @property
    def admin_settings_path(self) -> Path:
        return self.admin_home / ADMIN_SETTINGS_FILE_NAME

    def is_local_auth(self) -> bool:
        return self.auth_mode == AUTH_MODE_LOCAL

    @staticmethod
    def _read_timeout() -> float:
        raw = os.getenv("MAPLE_API_TIMEOUT")
        if raw is None or raw == "":
            return DEFAULT_API_TIMEOUT
        try:
            timeout = float(raw)
        except ValueError as e:
            raise ConfigurationError(f"MAPLE_API_TIMEOUT must be a number, got '{raw}'") from e
        if timeout <= 0:
            raise ConfigurationError("MAPLE_API_TIMEOUT must be positive")
        return timeout

    @staticmethod
    def _get_secret_value(
        secret_id: str,
        region_name: str = DEFAULT_REGION,
        max_retries: int = 3,
        base_wait: float = 1.0,
    ) -> Dict[str, Any]:
        """
        Fetch secret from Secrets Manager with exponential backoff.

        Args:
            secret_id: Secret identifier in Secrets Manager
            region_name: AWS region holding the secret
            max_retries: Maximum number of retry attempts
            base_wait: Base wait time in seconds for exponential backoff

        Returns:
            Parsed secret JSON as dictionary

        Raises:
            RuntimeError: If secret cannot be retrieved after retries
        """
        client = boto3.client("secretsmanager", region_name=region_name)

        for attempt in range(max_retries):
            try:
                response = client.get_secret_value(SecretId=secret_id)
                secret_string = response.get("SecretString")
                if not secret_string:
                    raise ValueError(f"Secret {secret_id} has empty value")
                return json.loads(secret_string)
            except ClientError as e:
                error_code = e.response["Error"]["Code"]
                if error_code == "ResourceNotFoundException":
                    raise RuntimeError(
                        f"Secret '{secret_id}' not found in Secrets Manager. "
                        f"Please verify the secret exists in region {region_name}"
                    ) from e
                elif error_code in ["AccessDeniedException", "UnauthorizedOperation"]:
                    raise RuntimeError(
                        f"Access denied to secret '{secret_id}'. "
                        f"Verify the caller has secretsmanager:GetSecretValue permission"
                    ) from e
                elif error_code == "DecryptionFailure":
                    raise RuntimeError(
                        f"Failed to decrypt secret '{secret_id}'. Verify KMS key permissions"
                    ) from e
                else:
                    if attempt < max_retries - 1:
                        wait_time = base_wait * (2**attempt)
                        logger.warning(
                            f"Transient error fetching secret {secret_id}: {error_code}. "
                            f"Retrying in {wait_time}s (attempt {attempt + 1}/{max_retries})"
                        )
                        time.sleep(wait_time)
                    else:
                        raise RuntimeError(
                            f"Failed to retrieve secret '{secret_id}' after {max_retries} attempts: {error_code}"
                        ) from e
            except json.JSONDecodeError as e:
                raise RuntimeError(f"Secret '{secret_id}' contains invalid JSON: {str(e)}") from e
            except Exception as e:  # noqa: BLE001
                if attempt < max_retries - 1:
                    wait_time = base_wait * (2**attempt)
                    logger.warning(
                        f"Unexpected error fetching secret {secret_id}: {str(e)}. "
                        f"Retrying in {wait_time}s (attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(wait_time)
                else:
                    raise RuntimeError(
                        f"Unexpected error retrieving secret '{secret_id}': {str(e)}"
                    ) from e

        raise RuntimeError(
            f"Failed to retrieve secret '{secret_id}' - exhausted all retry attempts"
        )

    def load_admin_credentials(self) -> Dict[str, str]:
        """
        Load the admin login used in local auth mode.

        Priority:
        1. MAPLE_ADMIN_EMAIL / MAPLE_ADMIN_PASSWORD environment variables
        2. Local secrets file ("admin" key) when USE_LOCAL_SECRETS_FILE=true
        3. Secrets Manager

        Returns:
            Dictionary with 'email' and 'password' keys

        Raises:
            ConfigurationError: If credentials are missing or incomplete
        """
        env_email = os.getenv("MAPLE_ADMIN_EMAIL")
        env_password = os.getenv("MAPLE_ADMIN_PASSWORD")
        if env_email and env_password:
            return {"email": env_email, "password": env_password}

        try:
            if _use_local_secrets():
                credentials = self._load_from_local_file(_local_secrets_file()).get("admin", {})
            else:
                credentials = self._get_secret_value(ADMIN_SECRET_ID, region_name=self.region_name)
        except RuntimeError as e:
            raise ConfigurationError(f"Admin credentials unavailable: {e}") from e

        if not credentials.get("email") or not credentials.get("password"):
            raise ConfigurationError(
                f"Admin credentials missing required keys. "
                f"Expected: email, password. Got: {sorted(credentials.keys())}"
            )
        return {"email": credentials["email"], "password": credentials["password"]}

    @staticmethod
    def _load_from_local_file(filepath: str) -> Dict[str, Any]:
        """
        Load secrets from local JSON file for development.

        Raises:
            RuntimeError: If file cannot be read or contains invalid JSON
        """
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            raise RuntimeError(
                f"Local secrets file not found: {filepath}. "
                f"Use AWS Secrets Manager or provide USE_LOCAL_SECRETS_FILE=true and LOCAL_SECRETS_FILE_PATH"
            )
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Local secrets file contains invalid JSON: {str(e)}")

    @staticmethod
    def _load_schema(schema_path: Path) -> Dict[str, Any]:
        try:
            with open(schema_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            logger.error(f"Admin settings schema file not found: {schema_path}")
            raise
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in admin settings schema: {e}")
            raise ValueError(f"Invalid JSON in {schema_path}: {e}") from e

    @staticmethod
    def _validate_admin_settings(document: Dict[str, Any], schema_path: Path) -> None:
        schema = Settings._load_schema(schema_path)
        try:
            jsonschema.validate(instance=document, schema=schema)
        except jsonschema.ValidationError as e:
            logger.error(f"Admin settings failed schema validation: {e.message}")
            raise ValueError(f"Admin settings validation failed: {e.message}") from e
        except jsonschema.SchemaError as e:
            logger.error(f"Admin settings schema is invalid: {e.message}")
            raise ValueError(f"Admin settings schema is invalid: {e.message}") from e

    def load_admin_settings(
        self,
        settings_path: Optional[Path] = None,
        schema_path: Path = ADMIN_SETTINGS_SCHEMA_PATH,
    ) -> AdminSettings:
        """
        Load the admin settings page from YAML and validate against schema.

        A missing file yields defaults.

        Raises:
            ValueError: If YAML is malformed or fails schema validation
        """
        path = Path(settings_path or self.admin_settings_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except FileNotFoundError:
            logger.info(f"No admin settings at {path}; using defaults")
            return AdminSettings()
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in admin settings: {e}")
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not document:
            return AdminSettings()
        if not isinstance(document, dict):
            raise ValueError(f"Admin settings in {path} must be a mapping")

        self._validate_admin_settings(document, schema_path)
        return AdminSettings(
            admin_email=document.get("admin_email"),
            send_booking_confirmations=document.get("send_booking_confirmations", True),
        )

    def save_admin_settings(
        self,
        admin_settings: AdminSettings,
        settings_path: Optional[Path] = None,
        schema_path: Path = ADMIN_SETTINGS_SCHEMA_PATH,
    ) -> Path:
        """
        Validate and persist the admin settings page.

        Raises:
            ValueError: If the admin email is missing or invalid
        """
        if not admin_settings.admin_email:
            raise ValueError("Admin email is required")

        document = admin_settings.to_dict()
        self._validate_admin_settings(document, schema_path)

        path = Path(settings_path or self.admin_settings_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, allow_unicode=True, sort_keys=True)
        logger.info(f"Saved admin settings to {path}")
        return path

    def setup_redaction_filter(
        self,
        logger_instance: logging.Logger,
        redaction_filter: Optional[SecretRedactionFilter] = None,
    ) -> SecretRedactionFilter:
        """
        Configure logger and its handlers with a secret redaction filter.

        Args:
            logger_instance: Logger instance to configure
            redaction_filter: Existing filter to extend instead of creating one
        """
        secrets: Dict[str, Any] = {}
        env_password = os.getenv("MAPLE_ADMIN_PASSWORD")
        if env_password:
            secrets["password"] = env_password
        elif self.is_local_auth() and _use_local_secrets():
            # Secrets Manager is skipped here so startup never waits on retries
            try:
                secrets.update(self.load_admin_credentials())
            except ConfigurationError:
                # Redaction still works for values registered later
                pass

        if redaction_filter is None:
            redaction_filter = SecretRedactionFilter(secrets)
        else:
            redaction_filter.add_secret(secrets)

        # Handler filters also see records propagated from child loggers
        logger_instance.addFilter(redaction_filter)
        for handler in logger_instance.handlers:
            handler.addFilter(redaction_filter)
        return redaction_filter


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings()


_redaction_filter: Optional[SecretRedactionFilter] = None


def setup_logging_redaction(settings: Optional[Settings] = None) -> SecretRedactionFilter:
    """
    Setup logging redaction for the root logger, its handlers and the
    structured log handlers.

    Repeated calls reuse one filter and register any new secrets on it.
    """
    global _redaction_filter
    _redaction_filter = (settings or get_settings()).setup_redaction_filter(
        logging.getLogger(), _redaction_filter
    )
    register_handler_filter(_redaction_filter)
    return _redaction_filter
