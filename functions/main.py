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

# Cloud functions for the contract management backend - user roles,
# attachments, audit log, status notifications and contract archival.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import json
from dataclasses import asdict
from typing import Callable, Optional

# Third-party library imports
from dacite import from_dict, Config
from firebase_admin import initialize_app, firestore
from firebase_functions import https_fn, identity_fn, logger, options
from firebase_functions.firestore_fn import (
    on_document_created,
    on_document_updated,
    Event,
    Change,
    DocumentSnapshot,
)

# Local application imports
from archival import archival
from attachments import attachments
from attachments.storage import get_storage_client
from audit import audit
from identity import identity
from identity.identity import CallerIdentity
from notifications import notifications
from notifications.email_client import get_email_client
from roles import roles
from shared.api import CreateUserResult, DeleteFileResult, UploadFileResult
from shared.config import get_settings
from shared.firebase_constants import CONTRACT_DOCUMENT_PATH
from shared.json_utils import convert_keys
from shared.types import Contract

initialize_app()

CORS_OPTIONS = options.CorsOptions(
    cors_origins=get_settings().cors_origin,
    cors_methods=["post"],
)

ERROR_STATUS_CODES = {
    https_fn.FunctionsErrorCode.UNAUTHENTICATED: 403,
    https_fn.FunctionsErrorCode.PERMISSION_DENIED: 403,
    https_fn.FunctionsErrorCode.INVALID_ARGUMENT: 400,
    https_fn.FunctionsErrorCode.FAILED_PRECONDITION: 400,
    https_fn.FunctionsErrorCode.NOT_FOUND: 404,
    https_fn.FunctionsErrorCode.ALREADY_EXISTS: 409,
}


def _contract_from_snapshot(snapshot: Optional[DocumentSnapshot]) -> Contract:
    data = snapshot.to_dict() if snapshot else None
    return from_dict(
        data_class=Contract,
        data=convert_keys(data or {}, "camel_to_snake"),
        config=Config(check_types=False),
    )


def _json_response(payload: dict, status: int = 200) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(payload), status=status, mimetype="application/json"
    )


def _error_response(error: https_fn.HttpsError) -> https_fn.Response:
    status = ERROR_STATUS_CODES.get(error.code, 500)
    return _json_response(
        {"error": {"status": error.code.name, "message": error.message}}, status
    )


def _request_data(req: https_fn.Request) -> dict:
    """Returns the JSON body, unwrapping a callable-style {"data": ...} envelope."""
    body = req.get_json(silent=True)
    if not isinstance(body, dict):
        return {}
    data = body.get("data", body)
    return data if isinstance(data, dict) else {}


def _handle_request(
    req: https_fn.Request, handler: Callable[[CallerIdentity, dict], object]
) -> https_fn.Response:
    """
    Runs an authenticated POST handler and turns its result or error into a
    JSON response.

    Args:
        req (https_fn.Request): The incoming request.
        handler: Called with the verified caller and the request data; returns
            a result dataclass.

    Returns:
        https_fn.Response: The camelCase result, or {"error": {...}} with the
        mapped status code.
    """
    if req.method == "OPTIONS":
        return https_fn.Response(status=204)
    if req.method != "POST":
        return _json_response(
            {"error": {"status": "METHOD_NOT_ALLOWED", "message": "Use POST."}}, 405
        )

    try:
        caller = identity.resolve_caller(req.headers.get("Authorization"))
        result = handler(caller, _request_data(req))
    except https_fn.HttpsError as e:
        logger.warn(f"Request to {req.path} failed: {e.code.name}: {e.message}")
        return _error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error handling {req.path}: {e}")
        return _error_response(
            https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL, "An unexpected error occurred."
            )
        )

    return _json_response(convert_keys(asdict(result), "snake_to_camel"))


@identity_fn.before_user_created()
def assign_initial_role(
    event: identity_fn.AuthBlockingEvent,
) -> identity_fn.BeforeCreateResponse | None:
    """
    Assigns a role to every newly registered user. The first user ever
    registered becomes the admin.

    Errors are logged and never block the signup.
    """
    user = event.data
    try:
        role = roles.ensure_initial_role(firestore.client(), user.uid, user.email)
        logger.info(f"Role '{role}' assigned to user {user.uid}.")
    except Exception as e:
        logger.error(f"Failed to assign role for user {user.uid}: {e}")
    return None


@https_fn.on_request(cors=CORS_OPTIONS)
def create_user(req: https_fn.Request) -> https_fn.Response:
    """
    Creates a user with a given role. Only admins and managers may call it.

    Body: {email, password, role}. Returns {success, uid}.
    """

    def _create(caller: CallerIdentity, data: dict) -> CreateUserResult:
        uid = roles.create_user(
            firestore.client(),
            caller,
            data.get("email"),
            data.get("password"),
            data.get("role"),
        )
        return CreateUserResult(success=True, uid=uid)

    return _handle_request(req, _create)


@https_fn.on_request(cors=CORS_OPTIONS)
def upload_file(req: https_fn.Request) -> https_fn.Response:
    """
    Attaches a file to a contract.

    Body: {fileContent (base64 data URI), fileName, contractId}.
    Returns {success, newAttachment}.
    """

    def _upload(caller: CallerIdentity, data: dict) -> UploadFileResult:
        new_attachment = attachments.upload_file(
            firestore.client(),
            get_storage_client(),
            caller,
            contract_id=data.get("contractId"),
            file_content=data.get("fileContent"),
            file_name=data.get("fileName"),
        )
        return UploadFileResult(success=True, new_attachment=new_attachment)

    return _handle_request(req, _upload)


@https_fn.on_request(cors=CORS_OPTIONS)
def delete_file(req: https_fn.Request) -> https_fn.Response:
    """
    Removes an attachment record and its file.

    Body: {contractId, attachmentId, storagePath, fileName?}. Returns {success}.
    """

    def _delete(caller: CallerIdentity, data: dict) -> DeleteFileResult:
        attachments.delete_file(
            firestore.client(),
            get_storage_client(),
            caller,
            contract_id=data.get("contractId"),
            attachment_id=data.get("attachmentId"),
            storage_path=data.get("storagePath"),
            file_name=data.get("fileName"),
        )
        return DeleteFileResult(success=True)

    return _handle_request(req, _delete)


@https_fn.on_request(cors=CORS_OPTIONS, timeout_sec=300)
def delete_contract_and_log(req: https_fn.Request) -> https_fn.Response:
    """
    Archives a contract with its attachments and audit log into
    deletedContracts, then deletes the live records and files.
    Only admins and managers may call it.

    Body: {contractId}. Returns {success, message}.
    """

    def _archive(caller: CallerIdentity, data: dict):
        return archival.archive_contract(
            firestore.client(),
            get_storage_client(),
            caller,
            data.get("contractId"),
        )

    return _handle_request(req, _archive)


def _send_status_notification(
    contract_id: str, contract: Contract, previous_status: Optional[str]
) -> None:
    settings = get_settings()
    notifications.notify(
        contract_id,
        contract,
        previous_status,
        email_client=get_email_client(),
        recipients=settings.status_recipients,
        app_base_url=settings.app_base_url,
    )


@on_document_created(document=CONTRACT_DOCUMENT_PATH)
def notify_contract_created(event: Event[DocumentSnapshot | None]) -> None:
    """Emails the recipient for a new contract's initial status."""
    if not event.data:
        return
    contract_id = event.params["contractId"]
    _send_status_notification(contract_id, _contract_from_snapshot(event.data), None)


@on_document_updated(document=CONTRACT_DOCUMENT_PATH)
def notify_contract_status_changed(
    event: Event[Change[DocumentSnapshot | None]],
) -> None:
    """Emails the recipient for the new status, only when the status changed."""
    contract_id = event.params["contractId"]
    before = _contract_from_snapshot(event.data.before)
    after = _contract_from_snapshot(event.data.after)

    if not notifications.should_notify(before.status, after.status):
        return
    _send_status_notification(contract_id, after, before.status)


@on_document_created(document=CONTRACT_DOCUMENT_PATH)
def audit_contract_created(event: Event[DocumentSnapshot | None]) -> None:
    if not event.data:
        return
    contract_id = event.params["contractId"]
    audit.record_contract_created(
        firestore.client(), contract_id, _contract_from_snapshot(event.data)
    )


@on_document_updated(document=CONTRACT_DOCUMENT_PATH)
def audit_contract_updated(event: Event[Change[DocumentSnapshot | None]]) -> None:
    """Writes one audit entry per changed tracked field, in a single batch."""
    contract_id = event.params["contractId"]
    count = audit.record_contract_updated(
        firestore.client(),
        contract_id,
        _contract_from_snapshot(event.data.before),
        _contract_from_snapshot(event.data.after),
    )
    if count:
        logger.info(f"Recorded {count} changes to contract {contract_id}.")
