"""HTTP client for communicating with the Vault service."""

import mimetypes
import os
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional

import httpx

from common.logging_config import get_logger
from cli.config import Config
from cli.utils import format_file_size, read_chunk

logger = get_logger(__name__)


class VaultClient:
    """HTTP client for the Vault API with retry logic and error handling."""

    def __init__(self, config: Config):
        """
        Initialize vault client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized VaultClient [base_url={config.get_base_url()}]")

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
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        self.request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', None) or {}
        headers['X-Request-ID'] = self.request_id
        caller_id = self.config.get_caller_id()
        if caller_id:
            headers['X-Caller-Id'] = caller_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        last_exception = None
        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, headers=headers, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )
                break

            if response.status_code >= 500 and attempt < max_retries:
                delay = backoff ** attempt
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                )
                time.sleep(delay)
                continue

            if 400 <= response.status_code < 500:
                logger.warning(
                    f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )
            return response

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to Vault server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'SIZE_LIMIT_EXCEEDED': 'File is larger than the maximum object size.',
            'CHUNK_SIZE_EXCEEDED': 'Chunk is larger than the maximum chunk size.',
            'OBJECT_NOT_FOUND': 'Object not found on server.',
            'UNAUTHORIZED_ACCESS': 'You do not own this object.',
            'AUTHENTICATION_REQUIRED': 'This object is private. Set a caller id first: vault-cli set-caller <id>',
            'INVALID_CHUNK_INDEX': 'Invalid chunk index.',
        }

        if code == 'MISSING_CHUNK':
            return f"Upload incomplete: chunk {error_data.get('chunk_index')} is missing."

        if code in error_messages:
            return error_messages[code]

        return f"{detail} (Code: {code})" if code != 'UNKNOWN' else detail

    def _upload_chunks(self, object_id: str, path: Path, indices: Iterable[int], chunk_size: int) -> Optional[str]:
        """
        PUT the given chunk indices of a local file.

        Returns:
            Error message, or None if every chunk was stored
        """
        for index in indices:
            data = read_chunk(path, index, chunk_size)
            response = self._request_with_retry(
                'PUT',
                f'/objects/{object_id}/chunks/{index}',
                content=data,
                headers={'Content-Type': 'application/octet-stream'},
            )
            if response.status_code != 200:
                return f"Error uploading chunk {index} of {object_id}: {self._format_error(response)}"
            logger.info(f"Uploaded chunk {index} [object_id={object_id}] [bytes={len(data)}]")
        return None

    def upload_file(
        self,
        file_path: str,
        is_public: bool = False,
        content_type: Optional[str] = None,
        tags: Optional[list] = None,
    ) -> str:
        """
        Create an object for a local file and upload it chunk by chunk.

        Returns:
            Result message including the object id
        """
        path = Path(file_path)
        if not path.is_file():
            return f"Error: File not found: {file_path}"

        size = os.path.getsize(path)
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'

        try:
            response = self._request_with_retry('POST', '/objects', json={
                'name': path.name,
                'size': size,
                'content_type': content_type,
                'is_public': is_public,
                'tags': tags or [],
            })
            if response.status_code != 201:
                return f"Error creating object for {file_path}: {self._format_error(response)}"

            created = response.json()
            object_id = created['object_id']
            chunk_size = created['chunk_size']

            indices = range(created['expected_chunk_count'])
            error = self._upload_chunks(object_id, path, indices, chunk_size)
            if error:
                return f"{error}\nResume with: vault-cli resume {object_id} {file_path}"

            return (
                f"Uploaded: {path.name} (ID: {object_id}, Size: {format_file_size(size)}, "
                f"Chunks: {created['expected_chunk_count']})"
            )
        except ConnectionError as e:
            logger.error(f"Connection error during upload: {e}")
            return f"Error: {e}"

    def resume_upload(self, object_id: str, file_path: str) -> str:
        """
        Upload only the chunks the server does not have yet.
        """
        path = Path(file_path)
        if not path.is_file():
            return f"Error: File not found: {file_path}"

        try:
            response = self._request_with_retry('GET', f'/objects/{object_id}/status')
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            progress = response.json()
            info = self._request_with_retry('GET', f'/objects/{object_id}')
            if info.status_code != 200:
                return f"Error: {self._format_error(info)}"
            chunk_size = info.json()['chunk_size']

            written = set(progress['written_indices'])
            missing = [i for i in range(progress['expected_chunk_count']) if i not in written]
            if not missing:
                return f"Object {object_id} is already complete."

            error = self._upload_chunks(object_id, path, missing, chunk_size)
            if error:
                return error
            return f"Resumed: uploaded {len(missing)} missing chunk(s) of {object_id}"
        except ConnectionError as e:
            return f"Error: {e}"

    def download(self, object_id: str, output_path: str) -> str:
        """
        Stream an object's bytes into a local file.
        """
        output = Path(output_path)
        try:
            with self.session.stream(
                'GET',
                f'/objects/{object_id}/content',
                headers=self._identity_headers(),
            ) as response:
                if response.status_code != 200:
                    response.read()
                    return f"Download failed: {self._format_error(response)}"

                output.parent.mkdir(parents=True, exist_ok=True)
                written = 0
                with open(output, 'wb') as f:
                    for piece in response.iter_bytes():
                        f.write(piece)
                        written += len(piece)

            return f"Downloaded {object_id} to {output} ({format_file_size(written)})"
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.error(f"Connection error during download: {e}")
            return f"Error: Cannot download {object_id}: {e}"

    def _identity_headers(self) -> dict:
        caller_id = self.config.get_caller_id()
        return {'X-Caller-Id': caller_id} if caller_id else {}

    def info(self, object_id: str) -> str:
        try:
            response = self._request_with_retry('GET', f'/objects/{object_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return self._format_object(response.json())

    def list_objects(self, owner_id: Optional[str] = None, content_type: Optional[str] = None) -> str:
        """
        List an owner's objects, or public objects (optionally by content type).
        """
        if owner_id:
            endpoint, params = f'/owners/{owner_id}/objects', None
        else:
            endpoint, params = '/objects', ({'content_type': content_type} if content_type else None)

        try:
            response = self._request_with_retry('GET', endpoint, params=params)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        objects = response.json()['objects']
        if not objects:
            return "No objects found."
        return '\n'.join(self._format_object(obj) for obj in objects)

    def delete(self, object_id: str) -> str:
        try:
            response = self._request_with_retry('DELETE', f'/objects/{object_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 204:
            return f"Delete failed: {self._format_error(response)}"
        return f"Deleted: {object_id}"

    def usage(self, owner_id: Optional[str] = None) -> str:
        endpoint = f'/storage/owners/{owner_id}' if owner_id else '/storage/total'
        try:
            response = self._request_with_retry('GET', endpoint)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        used = response.json()['bytes_used']
        label = owner_id if owner_id else 'total'
        return f"Storage used ({label}): {format_file_size(used)}"

    @staticmethod
    def _format_object(obj: dict) -> str:
        visibility = 'public' if obj['is_public'] else 'private'
        tags = ', '.join(f"{t['key']}={t['value']}" for t in obj.get('tags', []))
        line = (
            f"{obj['object_id']}  {obj['name']}  {format_file_size(obj['size'])}  "
            f"{obj['content_type']}  {visibility}  owner={obj['owner_id']}"
        )
        return f"{line}  [{tags}]" if tags else line
