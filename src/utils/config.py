"""
Configuration and secrets management for the provider directory.

All settings come from Streamlit's secrets (``.streamlit/secrets.toml``) with
fallbacks, so a checkout without any secrets runs in offline demo mode.

Usage:
    from src.utils.config import get_api_config, get_backend_config

    backend_config = get_backend_config()
    if backend_config["kind"] == "sql":
        database_url = backend_config["database_url"]

    s3_config = get_api_config('s3')
    bucket = s3_config.get('bucket_name')
"""

import logging
from typing import Any, Dict

import streamlit as st

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (35.1903, -0.6308)  # Sidi Bel Abbes


def get_secret(key_path: str, default: Any = None) -> Any:
    """
    Safely retrieve a secret from Streamlit's secrets management.

    Args:
        key_path: Dot-notation path to the secret (e.g., 'backend.database_url')
        default: Default value if secret is not found

    Returns:
        The secret value or default if not found

    Examples:
        >>> get_secret('backend.kind', 'document')
        >>> get_secret('s3.bucket_name')
        >>> get_secret('app.debug_mode', False)
    """
    try:
        keys = key_path.split(".")
        value = st.secrets

        for key in keys:
            try:
                value = value[key]
            except (KeyError, TypeError, AttributeError):
                return default

        return value
    except Exception as e:
        # st.secrets raises FileNotFoundError (or a parse error) when no secrets file exists
        logger.debug(f"Failed to retrieve secret '{key_path}': {e}")
        return default


def get_api_config(api_name: str) -> Dict[str, Any]:
    """
    Get configuration for a specific API or service.

    Args:
        api_name: Name of the API/service ('geocoding' or 's3')

    Returns:
        Dictionary containing the API configuration
    """
    if api_name == "geocoding":
        return {
            "nominatim_user_agent": get_secret("geocoding.nominatim_user_agent", "provider_directory"),
            "country_hint": get_secret("geocoding.country_hint", "Algeria"),
            "request_timeout": get_secret("geocoding.request_timeout", 10),
            "rate_limit_delay": get_secret("geocoding.rate_limit_delay", 1.0),
            "max_retries": get_secret("geocoding.max_retries", 3),
        }
    elif api_name == "s3":
        return {
            "aws_access_key_id": get_secret("s3.aws_access_key_id", ""),
            "aws_secret_access_key": get_secret("s3.aws_secret_access_key", ""),
            "bucket_name": get_secret("s3.bucket_name", ""),
            "region_name": get_secret("s3.region_name", "us-east-1"),
            "documents_prefix": get_secret("s3.documents_prefix", "directory"),
            "uploads_prefix": get_secret("s3.uploads_prefix", "uploads"),
        }
    else:
        return {}


def get_backend_config() -> Dict[str, Any]:
    """
    Get storage backend configuration.

    Returns:
        Dictionary with ``kind`` ('document' or 'sql'), ``database_url``,
        ``document_store`` ('memory' or 's3'), ``offline_mode`` and
        ``uploads_dir`` (local file storage when S3 is not configured)
    """
    return {
        "kind": get_secret("backend.kind", "document"),
        "database_url": get_secret("backend.database_url", "sqlite:///directory.db"),
        "document_store": get_secret("backend.document_store", "memory"),
        "offline_mode": get_secret("backend.offline_mode", True),
        "uploads_dir": get_secret("backend.uploads_dir", "data/uploads"),
    }


def get_app_config() -> Dict[str, Any]:
    """
    Get general application configuration.

    Returns:
        Dictionary containing app configuration
    """
    return {
        "environment": get_secret("app.environment", "production"),
        "debug_mode": get_secret("app.debug_mode", False),
        "log_level": get_secret("app.log_level", "INFO"),
        "default_latitude": get_secret("app.default_latitude", DEFAULT_CENTER[0]),
        "default_longitude": get_secret("app.default_longitude", DEFAULT_CENTER[1]),
        "results_page_size": get_secret("app.results_page_size", 20),
    }


def is_api_enabled(api_name: str) -> bool:
    """
    Check if a specific API is enabled and properly configured.

    Args:
        api_name: Name of the API to check

    Returns:
        True if the API is enabled and has required configuration
    """
    if api_name == "s3":
        config = get_api_config("s3")
        return (
            bool(config["aws_access_key_id"]) and bool(config["aws_secret_access_key"]) and bool(config["bucket_name"])
        )
    elif api_name == "database":
        config = get_backend_config()
        return config["kind"] == "sql" and bool(config["database_url"])
    elif api_name == "geocoding":
        return bool(get_api_config("geocoding")["nominatim_user_agent"])
    else:
        return False


def validate_configuration() -> Dict[str, str]:
    """
    Validate the application configuration and return any warnings or errors.

    Returns:
        Dictionary with configuration validation results
    """
    issues = {}

    backend_config = get_backend_config()
    if backend_config["kind"] not in ("document", "sql"):
        issues["backend"] = f"Unknown backend kind: {backend_config['kind']}"
    elif backend_config["kind"] == "sql":
        if not str(backend_config["database_url"]).startswith(("postgresql", "mysql", "sqlite")):
            issues["database"] = "Database URL format may be invalid"
    elif backend_config["document_store"] == "s3" and not is_api_enabled("s3"):
        issues["s3"] = "Document store is set to S3 but S3 credentials or bucket are missing"
    elif backend_config["document_store"] not in ("memory", "s3"):
        issues["backend"] = f"Unknown document store: {backend_config['document_store']}"

    app_config = get_app_config()
    if app_config["environment"] not in ["development", "staging", "production"]:
        issues["app"] = f"Unknown environment: {app_config['environment']}"

    return issues
