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
Test helpers: an in-memory stand-in for the Firestore client and mock
contract data.
"""

import itertools
from typing import Optional

from identity.identity import CallerIdentity


class FakeDocumentSnapshot:
    def __init__(self, reference: "FakeDocumentReference", data: Optional[dict]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[dict]:
        return dict(self._data) if self._data is not None else None

    def get(self, field_path: str):
        return (self._data or {}).get(field_path)


class FakeDocumentReference:
    def __init__(self, db: "FakeFirestore", path: str):
        self._db = db
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    def collection(self, name: str) -> "FakeCollectionReference":
        return FakeCollectionReference(self._db, f"{self.path}/{name}")

    def get(self) -> FakeDocumentSnapshot:
        return FakeDocumentSnapshot(self, self._db.documents.get(self.path))

    def set(self, data: dict, merge: bool = False) -> None:
        self._db._set(self.path, data, merge)

    def update(self, data: dict) -> None:
        self._db._set(self.path, data, merge=True)

    def delete(self) -> None:
        self._db._delete(self.path)


class FakeCollectionReference:
    def __init__(self, db: "FakeFirestore", path: str, limit: Optional[int] = None):
        self._db = db
        self.path = path
        self._limit = limit

    def document(self, document_id: Optional[str] = None) -> FakeDocumentReference:
        if document_id is None:
            document_id = self._db.next_id()
        return FakeDocumentReference(self._db, f"{self.path}/{document_id}")

    def add(self, data: dict):
        doc_ref = self.document()
        doc_ref.set(data)
        return None, doc_ref

    def limit(self, count: int) -> "FakeCollectionReference":
        return FakeCollectionReference(self._db, self.path, count)

    def stream(self):
        prefix = self.path + "/"
        snapshots = [
            FakeDocumentSnapshot(FakeDocumentReference(self._db, path), data)
            for path, data in list(self._db.documents.items())
            if path.startswith(prefix) and "/" not in path[len(prefix) :]
        ]
        if self._limit is not None:
            snapshots = snapshots[: self._limit]
        return iter(snapshots)

    def get(self) -> list:
        return list(self.stream())


class FakeWriteBatch:
    """Applies all queued writes on commit, or none of them if the commit fails."""

    def __init__(self, db: "FakeFirestore"):
        self._db = db
        self._writes = []

    def set(self, doc_ref: FakeDocumentReference, data: dict, merge: bool = False):
        self._writes.append(("set", doc_ref.path, data, merge))

    def delete(self, doc_ref: FakeDocumentReference):
        self._writes.append(("delete", doc_ref.path, None, False))

    def commit(self):
        if self._db.fail_batch_commits:
            raise RuntimeError("Simulated batch commit failure")
        self._db.committed_batches.append(list(self._writes))
        self._db.write_log.append(("batch", len(self._writes)))
        for kind, path, data, merge in self._writes:
            if kind == "set":
                self._db._apply_set(path, data, merge)
            else:
                self._db.documents.pop(path, None)


class FakeFirestore:
    """
    In-memory Firestore client covering the calls the functions make:
    collection/document paths, add, set, get, delete, limit, stream and
    batched writes. Documents are kept in a flat dict keyed by path.
    """

    def __init__(self):
        self.documents = {}
        self.committed_batches = []
        self.write_log = []
        self.fail_writes_to = set()
        self.fail_batch_commits = False
        self._ids = itertools.count(1)

    def collection(self, name: str) -> FakeCollectionReference:
        return FakeCollectionReference(self, name)

    def batch(self) -> FakeWriteBatch:
        return FakeWriteBatch(self)

    def next_id(self) -> str:
        return f"doc{next(self._ids)}"

    def seed(self, path: str, data: dict) -> None:
        self.documents[path] = dict(data)

    def paths_under(self, prefix: str) -> list:
        return [path for path in self.documents if path.startswith(prefix)]

    def _set(self, path: str, data: dict, merge: bool) -> None:
        if path in self.fail_writes_to:
            raise RuntimeError(f"Simulated write failure for {path}")
        self._apply_set(path, data, merge)
        self.write_log.append(("set", path))

    def _apply_set(self, path: str, data: dict, merge: bool) -> None:
        if merge and path in self.documents:
            self.documents[path] = {**self.documents[path], **data}
        else:
            self.documents[path] = dict(data)

    def _delete(self, path: str) -> None:
        self.documents.pop(path, None)
        self.write_log.append(("delete", path))


def create_mock_contract_data(**overrides) -> dict:
    """A contract document as stored in Firestore (camelCase)."""
    data = {
        "title": "Lease A",
        "status": "Proposta Registrada",
        "contractedParty": "Acme Imóveis Ltda",
        "totalValue": 120000,
        "sector": "Facilities",
        "costCenter": "CC-100",
        "createdBy": "alice@example.com",
    }
    data.update(overrides)
    return data


def create_mock_caller(uid: str = "admin-uid", email: Optional[str] = "admin@example.com"):
    return CallerIdentity(uid=uid, email=email)
