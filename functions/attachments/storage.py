# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""
Storage abstraction for the Firebase bucket and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from firebase_admin import storage

from shared.config import get_settings


class StorageClient(Protocol):
    """Defines the operations the attachment handlers need from object storage."""

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        """Stores a publicly readable object and returns its public URL."""
        ...

    def delete(self, path: str) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://storage.example.test/bucket"
    stored_objects: dict = field(default_factory=dict)
    fail_deletes_for: set = field(default_factory=set)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self.stored_objects[path] = (data, content_type)
        return f"{self.base_url}/{path}"

    def delete(self, path: str) -> None:
        if path in self.fail_deletes_for:
            raise RuntimeError(f"Simulated delete failure for {path}")
        if path not in self.stored_objects:
            raise FileNotFoundError(path)
        del self.stored_objects[path]


@dataclass
class FirebaseStorageClient:
    """Storage client over the project's Cloud Storage bucket."""

    bucket_name: Optional[str] = None

    def _bucket(self):
        return storage.bucket(self.bucket_name)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        blob = self._bucket().blob(path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url

    def delete(self, path: str) -> None:
        self._bucket().blob(path).delete()


_storage_client: StorageClient | None = None


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = FirebaseStorageClient(bucket_name=settings.storage_bucket)
    return _storage_client
