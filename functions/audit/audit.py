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
from typing import Any, List, Tuple

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.constants import ACTION_CONTRACT_CREATED, NOT_APPLICABLE, TRACKED_FIELDS
from shared.firebase_constants import AUDIT_LOG_COLLECTION, CONTRACTS_COLLECTION
from shared.json_utils import to_firestore_dict
from shared.types import AuditEntry, Contract

logger = logging.getLogger(__name__)


def _audit_log_ref(db, contract_id: str):
    return (
        db.collection(CONTRACTS_COLLECTION)
        .document(contract_id)
        .collection(AUDIT_LOG_COLLECTION)
    )


def _entry_json(action: str, details: str, user: str) -> dict:
    entry = AuditEntry(
        action=action, details=details, user=user, timestamp=SERVER_TIMESTAMP
    )
    return to_firestore_dict(entry)


def _format_value(value: Any) -> str:
    if value is None or value == "":
        return NOT_APPLICABLE
    return str(value)


def append_entry(db, contract_id: str, action: str, details: str, user: str) -> None:
    """Appends a single entry to a contract's audit log."""
    _audit_log_ref(db, contract_id).add(_entry_json(action, details, user))


def record_contract_created(db, contract_id: str, contract: Contract) -> None:
    details = (
        f"Contrato '{_format_value(contract.title)}' criado com status "
        f"'{_format_value(contract.status)}'."
    )
    append_entry(db, contract_id, ACTION_CONTRACT_CREATED, details, contract.actor)
    logger.info(f"Audit entry '{ACTION_CONTRACT_CREATED}' written for {contract_id}.")


def diff_contract(before: Contract, after: Contract) -> List[Tuple[str, str]]:
    """
    Compares the tracked fields of two versions of a contract.

    Returns:
        list[tuple[str, str]]: (action, details) for each tracked field that
        changed, in tracked-field order.
    """
    changes = []
    for field_name, action in TRACKED_FIELDS:
        old_value = getattr(before, field_name)
        new_value = getattr(after, field_name)
        if old_value != new_value:
            changes.append(
                (action, f"{_format_value(old_value)} -> {_format_value(new_value)}")
            )
    return changes


def record_contract_updated(
    db, contract_id: str, before: Contract, after: Contract
) -> int:
    """
    Writes one audit entry per changed tracked field.

    All entries from a single update go into one batch, so they are
    persisted together and share the same server timestamp.

    Returns:
        int: The number of entries written.
    """
    changes = diff_contract(before, after)
    if not changes:
        return 0

    audit_log = _audit_log_ref(db, contract_id)
    batch = db.batch()
    for action, details in changes:
        batch.set(audit_log.document(), _entry_json(action, details, after.actor))
    batch.commit()

    logger.info(f"{len(changes)} audit entries written for {contract_id}.")
    return len(changes)
