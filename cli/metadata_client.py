"""HTTP client for the namespace service's metadata API."""

import time
import uuid
from typing import List, Optional

import httpx

from cli.config import Config
from common.logging_config import get_logger
from common.types import FileRecord, NamespaceEntry
from controller.schemas.namespace import (
    ChildrenResponse,
    CorruptFilesResponse,
    EntryResponse,
    FileRecordResponse,
    OperationResponse,
)
from fsck.exceptions import MetadataUnavailableError, PathNotFoundError

logger = get_logger(__name__)


class MetadataClient:
    """
    Remote MetadataService backed by the namespace service's HTTP API.

    Every call is retried on 5xx responses and network failures with
    exponential backoff. Once retries are exhausted the call raises
    MetadataUnavailableError so the checker can report FAILURE.
    """

    def __init__(self, config: Config):
        """
        Initialize metadata client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized MetadataClient [base_url={config.get_base_url()}]")

    def close(self) -> None:
        self.session.close()

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object (2xx or 4xx)

        Raises:
            MetadataUnavailableError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None
        response = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)
                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} "
                    f"[request_id={self.request_id}]"
                )
                if response.status_code < 500:
                    return response

                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                response = None
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                        f"[request_id={self.request_id}]"
                    )

        if response is not None:
            raise MetadataUnavailableError(
                f"{method} {endpoint} failed after {max_retries + 1} attempts: {self._format_error(response)}"
            )
        if isinstance(last_exception, httpx.TimeoutException):
            raise MetadataUnavailableError("Request timed out. Namespace service may be overloaded.")
        raise MetadataUnavailableError("Cannot connect to namespace service. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Extract the error detail sent by the namespace service.

        Args:
            response: HTTP response object

        Returns:
            Error message including status code and error code
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'
        return f"HTTP {response.status_code} {code}: {detail}"

    def _get(self, endpoint: str, path: str, **params) -> httpx.Response:
        response = self._request_with_retry('GET', endpoint, params={'path': path, **params})
        if response.status_code == 404:
            raise PathNotFoundError(path)
        if response.status_code != 200:
            raise MetadataUnavailableError(self._format_error(response))
        return response

    def _mutate(self, method: str, endpoint: str, **kwargs) -> bool:
        response = self._request_with_retry(method, endpoint, **kwargs)
        if response.status_code != 200:
            logger.warning(f"{method} {endpoint} refused: {self._format_error(response)}")
            return False
        return OperationResponse(**response.json()).success

    def resolve(self, path: str) -> Optional[NamespaceEntry]:
        """Return the entry at ``path`` or None if it does not exist."""
        try:
            response = self._get('/namespace/entry', path)
        except PathNotFoundError:
            return None
        return EntryResponse(**response.json()).to_entry()

    def list_children(self, path: str) -> List[NamespaceEntry]:
        response = self._get('/namespace/children', path)
        return [child.to_entry() for child in ChildrenResponse(**response.json()).children]

    def get_block_locations(self, path: str) -> FileRecord:
        response = self._get('/namespace/blocks', path)
        return FileRecordResponse(**response.json()).to_record()

    def rename(self, src: str, dst: str) -> bool:
        return self._mutate('POST', '/namespace/rename', json={'src': src, 'dst': dst})

    def mkdirs(self, path: str) -> bool:
        return self._mutate('POST', '/namespace/mkdirs', json={'path': path})

    def delete(self, path: str) -> bool:
        return self._mutate('DELETE', '/namespace/entry', params={'path': path})

    def list_corrupt_files(self) -> List[str]:
        response = self._request_with_retry('GET', '/namespace/corrupt-files')
        if response.status_code != 200:
            raise MetadataUnavailableError(self._format_error(response))
        return CorruptFilesResponse(**response.json()).files
