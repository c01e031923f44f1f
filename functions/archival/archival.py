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

import logging
from typing import List, Optional

from firebase_functions import https_fn
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from attachments.storage import StorageClient
from identity.identity import CallerIdentity
from roles import roles
from shared.api import ArchivalResult
from shared.constants import MAX_BATCH_WRITES
from shared.firebase_constants import (
    ATTACHMENTS_COLLECTION,
    AUDIT_LOG_COLLECTION,
    CONTRACTS_COLLECTION,
    DELETED_CONTRACTS_COLLECTION,
)
from shared.json_utils import to_firestore_dict
from shared.types import ArchivalPhase, ArchivedContract
from shared.validation import is_document_id, is_non_empty_string

logger = logging.getLogger(__name__)


def _log_phase(contract_id: str, phase: ArchivalPhase) -> None:
    logger.info(f"Archival of contract {contract_id}: {phase}.")


def _snapshot_with_id(doc) -> dict:
    return {"id": doc.id, **(doc.to_dict() or {})}


def _delete_files(storage_client: StorageClient, attachments: List[dict]) -> List[str]:
    """Deletes every attachment's file, returning the paths that failed."""
    failed = []
    for attachment in attachments:
        storage_path = attachment.get("storagePath")
        if not storage_path:
            continue
        try:
            storage_client.delete(storage_path)
        except Exception as e:
            logger.warning(f"Could not delete archived file {storage_path}: {e}")
            failed.append(storage_path)
    return failed


def archive_contract(
    db,
    storage_client: StorageClient,
    caller: CallerIdentity,
    contract_id: Optional[str],
) -> ArchivalResult:
    """
    Moves a contract and its attachments and audit log into the
    deletedContracts archive, then removes the live records and files.

    The archive document is written before anything is deleted, and every
    child record is read before the archive is written. Any failure up to
    and including the archive write leaves the live contract untouched.
    File deletions are best-effort; the live records are then removed in a
    single batch, so either the whole live contract disappears or none of
    it does.

    Args:
        db: Firestore client.
        storage_client (StorageClient): Bucket holding the attachment files.
        caller (CallerIdentity): The verified caller, recorded as deletedBy.
        contract_id (str): The contract to archive.

    Returns:
        ArchivalResult: Confirmation, child counts and any orphaned files.

    Raises:
        https_fn.HttpsError: PERMISSION_DENIED, INVALID_ARGUMENT, NOT_FOUND,
            or FAILED_PRECONDITION when the contract has more children than
            fit in one batch.
    """
    _log_phase(contract_id, ArchivalPhase.REQUESTED)

    roles.require_privileged(db, caller, "delete contracts")
    if not is_non_empty_string(contract_id):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify contractId.",
        )
    if not is_document_id(contract_id):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Invalid contractId: {contract_id}.",
        )
    _log_phase(contract_id, ArchivalPhase.AUTHORIZED)

    contract_ref = db.collection(CONTRACTS_COLLECTION).document(contract_id)
    contract_doc = contract_ref.get()
    if not contract_doc.exists:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.NOT_FOUND,
            f"Contract {contract_id} was not found.",
        )

    attachment_docs = list(contract_ref.collection(ATTACHMENTS_COLLECTION).stream())
    audit_docs = list(contract_ref.collection(AUDIT_LOG_COLLECTION).stream())

    # Children plus the contract itself must fit in the purge batch.
    if len(attachment_docs) + len(audit_docs) + 1 > MAX_BATCH_WRITES:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
            f"Contract {contract_id} has too many attachments and audit entries "
            "to be deleted in one batch.",
        )

    attachments = [_snapshot_with_id(doc) for doc in attachment_docs]
    audit_log = [_snapshot_with_id(doc) for doc in audit_docs]
    _log_phase(contract_id, ArchivalPhase.SNAPSHOTTED)

    archived = ArchivedContract(
        attachments=attachments,
        audit_log=audit_log,
        deleted_by=caller.display_name,
        deleted_at=SERVER_TIMESTAMP,
    )
    archive_fields = to_firestore_dict(archived)
    db.collection(DELETED_CONTRACTS_COLLECTION).document(contract_id).set(
        {**contract_doc.to_dict(), **archive_fields}
    )
    _log_phase(contract_id, ArchivalPhase.ARCHIVED)

    orphaned_files = _delete_files(storage_client, attachments)

    batch = db.batch()
    for doc in attachment_docs + audit_docs:
        batch.delete(doc.reference)
    batch.delete(contract_ref)
    batch.commit()
    _log_phase(contract_id, ArchivalPhase.PURGED)

    return ArchivalResult(
        success=True,
        message=f"Contrato {contract_id} arquivado e excluído com sucesso.",
        attachments_archived=len(attachments),
        audit_entries_archived=len(audit_log),
        orphaned_files=orphaned_files,
    )
