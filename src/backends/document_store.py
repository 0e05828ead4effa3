"""
Document stores for the document backend.

A document store keeps JSON-compatible dicts grouped by collection and keyed
by id. Two implementations:

- InMemoryDocumentStore: process-local, used for offline/demo mode and tests
- S3DocumentStore: one JSON object per document under
  ``<prefix>/<collection>/<id>.json`` in an S3 bucket

Usage:
    from src.backends.document_store import S3DocumentStore

    store = S3DocumentStore()
    if store.is_configured():
        store.put('providers', 'abc123', {'businessName': 'Clinique El Amel'})
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abstractmethod
    def list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        """All ``(doc_id, data)`` pairs in a collection."""


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store. Documents are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(initial or {})

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)

    def list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in self._collections.get(collection, {}).items()]


class S3DocumentStore(DocumentStore):
    """Documents stored as JSON objects in S3."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, client=None):
        """Initialize the store with configuration from secrets.

        Args:
            config: Optional S3 config dict; defaults to ``get_api_config('s3')``
            client: Optional pre-built boto3 client (tests inject a mock)
        """
        if config is None:
            from src.utils.config import get_api_config

            config = get_api_config("s3")
        self.config = config
        self.enabled = bool(config.get("bucket_name")) and (
            client is not None or (bool(config.get("aws_access_key_id")) and bool(config.get("aws_secret_access_key")))
        )
        self.prefix = (config.get("documents_prefix") or "directory").strip("/")
        self._client = client

    def is_configured(self) -> bool:
        return self.enabled

    def _get_client(self):
        """Lazy initialization of boto3 client."""
        if self._client is None and self.enabled:
            import boto3

            self._client = boto3.client(
                "s3",
                aws_access_key_id=self.config["aws_access_key_id"],
                aws_secret_access_key=self.config["aws_secret_access_key"],
                region_name=self.config.get("region_name", "us-east-1"),
            )
        if self._client is None:
            raise RuntimeError("S3 document store is not configured")
        return self._client

    def _key(self, collection: str, doc_id: str) -> str:
        return f"{self.prefix}/{collection}/{doc_id}.json"

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        client = self._get_client()
        try:
            response = client.get_object(Bucket=self.config["bucket_name"], Key=self._key(collection, doc_id))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            logger.error(f"Failed to read {collection}/{doc_id} from S3: {e}")
            raise
        return json.loads(response["Body"].read())

    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        client = self._get_client()
        try:
            client.put_object(
                Bucket=self.config["bucket_name"],
                Key=self._key(collection, doc_id),
                Body=json.dumps(data).encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to write {collection}/{doc_id} to S3: {e}")
            raise

    def delete(self, collection: str, doc_id: str) -> None:
        client = self._get_client()
        try:
            client.delete_object(Bucket=self.config["bucket_name"], Key=self._key(collection, doc_id))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete {collection}/{doc_id} from S3: {e}")
            raise

    def list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        client = self._get_client()
        folder = f"{self.prefix}/{collection}/"
        documents = []
        try:
            paginator = client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.config["bucket_name"], Prefix=folder):
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if not key.endswith(".json"):
                        continue
                    doc_id = key[len(folder) : -len(".json")]
                    response = client.get_object(Bucket=self.config["bucket_name"], Key=key)
                    documents.append((doc_id, json.loads(response["Body"].read())))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list S3 collection '{collection}': {e}")
            raise
        return documents
