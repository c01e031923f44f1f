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

import base64
import binascii
import logging
import mimetypes
from datetime import datetime, timezone
from typing import Optional, Tuple

from firebase_functions import https_fn
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from attachments.storage import StorageClient
from audit import audit
from identity.identity import CallerIdentity
from shared.api import NewAttachment
from shared.constants import ACTION_ATTACHMENT_ADDED, ACTION_ATTACHMENT_REMOVED
from shared.firebase_constants import ATTACHMENTS_COLLECTION, CONTRACTS_COLLECTION
from shared.json_utils import to_firestore_dict
from shared.types import Attachment
from shared.validation import is_document_id, is_non_empty_string

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _invalid_argument(message: str) -> https_fn.HttpsError:
    return https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, message)


def _attachments_ref(db, contract_id: str):
    return (
        db.collection(CONTRACTS_COLLECTION)
        .document(contract_id)
        .collection(ATTACHMENTS_COLLECTION)
    )


def decode_file_content(
    file_content: str, file_name: Optional[str] = None
) -> Tuple[bytes, str]:
    """
    Decodes an uploaded file sent as a base64 data URI
    ("data:application/pdf;base64,JVBERi0...") or as bare base64.

    Returns:
        tuple[bytes, str]: The file bytes and their content type. Bare base64
        gets a content type guessed from the file name.

    Raises:
        https_fn.HttpsError: INVALID_ARGUMENT if the payload is not base64.
    """
    content_type = None
    payload = file_content
    if file_content.startswith("data:"):
        header, separator, payload = file_content.partition(",")
        if not separator or ";base64" not in header:
            raise _invalid_argument("fileContent must be a base64 data URI.")
        content_type = header[len("data:") :].split(";")[0] or None

    if content_type is None and file_name:
        content_type, _ = mimetypes.guess_type(file_name)

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise _invalid_argument("fileContent is not valid base64.")

    return data, content_type or DEFAULT_CONTENT_TYPE


def build_storage_path(contract_id: str, file_name: str, now_ms: int) -> str:
    """
    Object path for an upload. The millisecond prefix keeps same-named files
    apart; two uploads of one name within the same millisecond still collide.
    """
    safe_name = file_name.replace("/", "_")
    return f"{CONTRACTS_COLLECTION}/{contract_id}/{now_ms}_{safe_name}"


def upload_file(
    db,
    storage_client: StorageClient,
    caller: CallerIdentity,
    contract_id: Optional[str],
    file_content: Optional[str],
    file_name: Optional[str],
    now: Optional[datetime] = None,
) -> NewAttachment:
    """
    Stores an uploaded file and records its metadata under the contract.

    Args:
        db: Firestore client.
        storage_client (StorageClient): Bucket to write the file to.
        caller (CallerIdentity): The verified uploader.
        contract_id (str): The contract the file is attached to.
        file_content (str): Base64 data URI of the file.
        file_name (str): Display name of the file.
        now (datetime | None): Upload time, defaults to the current UTC time.

    Returns:
        NewAttachment: The stored metadata, including the generated id.
    """
    if not (
        is_non_empty_string(file_content)
        and is_non_empty_string(file_name)
        and is_non_empty_string(contract_id)
    ):
        raise _invalid_argument("Must specify fileContent, fileName and contractId.")
    if not is_document_id(contract_id):
        raise _invalid_argument(f"Invalid contractId: {contract_id}.")

    data, content_type = decode_file_content(file_content, file_name)

    now = now or datetime.now(timezone.utc)
    storage_path = build_storage_path(contract_id, file_name, int(now.timestamp() * 1000))
    url = storage_client.upload_bytes(storage_path, data, content_type)
    logger.info(f"Uploaded {storage_path} ({len(data)} bytes, {content_type}).")

    attachment = Attachment(
        file_name=file_name,
        storage_path=storage_path,
        url=url,
        uploaded_by=caller.display_name,
        uploaded_at=SERVER_TIMESTAMP,
    )
    _, doc_ref = _attachments_ref(db, contract_id).add(
        to_firestore_dict(attachment)
    )

    try:
        audit.append_entry(
            db,
            contract_id,
            ACTION_ATTACHMENT_ADDED,
            f"Arquivo '{file_name}' anexado.",
            caller.display_name,
        )
    except Exception as e:
        logger.error(f"Failed to write attachment audit entry for {contract_id}: {e}")

    return NewAttachment(
        id=doc_ref.id,
        file_name=file_name,
        storage_path=storage_path,
        url=url,
        uploaded_by=caller.display_name,
        uploaded_at=now.isoformat(),
    )


def delete_file(
    db,
    storage_client: StorageClient,
    caller: CallerIdentity,
    contract_id: Optional[str],
    attachment_id: Optional[str],
    storage_path: Optional[str],
    file_name: Optional[str] = None,
) -> None:
    """
    Removes an attachment's metadata record, then its file.

    If the file deletion fails once the record is gone, the file is left
    orphaned in the bucket. That is logged and not reported to the caller.
    """
    if not (
        is_non_empty_string(contract_id)
        and is_non_empty_string(attachment_id)
        and is_non_empty_string(storage_path)
    ):
        raise _invalid_argument(
            "Must specify contractId, attachmentId and storagePath."
        )
    if not is_document_id(contract_id) or not is_document_id(attachment_id):
        raise _invalid_argument("contractId and attachmentId must be document ids.")
    if file_name is not None and not isinstance(file_name, str):
        raise _invalid_argument("fileName must be a string.")

    _attachments_ref(db, contract_id).document(attachment_id).delete()

    try:
        storage_client.delete(storage_path)
    except Exception as e:
        logger.warning(
            f"Attachment {attachment_id} removed but file {storage_path} could not "
            f"be deleted and is now orphaned: {e}"
        )

    try:
        audit.append_entry(
            db,
            contract_id,
            ACTION_ATTACHMENT_REMOVED,
            f"Arquivo '{file_name or storage_path}' removido.",
            caller.display_name,
        )
    except Exception as e:
        logger.error(f"Failed to write attachment audit entry for {contract_id}: {e}")
