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
from typing import Optional

from firebase_admin import auth
from firebase_functions import https_fn
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from identity.identity import CallerIdentity
from shared.firebase_constants import (
    CONFIG_COLLECTION,
    SETUP_CONFIG_DOCUMENT,
    USER_ROLES_COLLECTION,
)
from shared.json_utils import to_firestore_dict
from shared.types import Role, SetupConfig, UserRole
from shared.validation import is_non_empty_string

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


def is_privileged(role: Optional[str]) -> bool:
    """Returns True if the role may create users and archive contracts."""
    return role in PRIVILEGED_ROLES


def parse_role(value: Optional[str]) -> Optional[Role]:
    try:
        return Role(value)
    except ValueError:
        return None


def _write_role(db, uid: str, role: Role, email: Optional[str]) -> None:
    user_role = UserRole(role=role.value, email=email, created_at=SERVER_TIMESTAMP)
    db.collection(USER_ROLES_COLLECTION).document(uid).set(
        to_firestore_dict(user_role)
    )


def ensure_initial_role(db, uid: str, email: Optional[str]) -> Role:
    """
    Assigns the role of a newly created user.

    The very first user ever registered becomes an admin and the one-shot
    setup flag is written; everyone after that is a plain user.

    The emptiness check and the role write are not in a transaction: two
    signups racing on an empty collection can both be made admin.

    Args:
        db: Firestore client.
        uid (str): The new user's uid.
        email (str | None): The new user's email.

    Returns:
        Role: The role that was written.
    """
    existing = db.collection(USER_ROLES_COLLECTION).limit(1).get()

    if not existing:
        logger.info(f"No users found. Assigning {uid} as admin.")
        role = Role.ADMIN
        setup = SetupConfig(
            initial_admin_assigned=True,
            initial_admin_uid=uid,
            completed_at=SERVER_TIMESTAMP,
        )
        db.collection(CONFIG_COLLECTION).document(SETUP_CONFIG_DOCUMENT).set(
            to_firestore_dict(setup)
        )
    else:
        logger.info(f"Existing users found. Assigning {uid} as user.")
        role = Role.USER

    _write_role(db, uid, role, email)
    return role


def resolve_role(db, uid: str) -> Optional[Role]:
    """Reads the stored role for a uid. Unknown or missing roles give None."""
    doc = db.collection(USER_ROLES_COLLECTION).document(uid).get()
    if not doc.exists:
        return None
    return parse_role(doc.get("role"))


def require_privileged(db, caller: CallerIdentity, action: str) -> Role:
    role = resolve_role(db, caller.uid)
    if not is_privileged(role):
        logger.warning(f"User {caller.uid} with role {role} denied: {action}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.PERMISSION_DENIED,
            f"Only administrators or managers can {action}.",
        )
    return role


def create_user(
    db,
    caller: CallerIdentity,
    email: Optional[str],
    password: Optional[str],
    role: Optional[str],
) -> str:
    """
    Creates a user account and its role record on behalf of a privileged caller.

    Args:
        db: Firestore client.
        caller (CallerIdentity): The verified caller.
        email (str): Email of the new account.
        password (str): Initial password of the new account.
        role (str): Role label to assign.

    Returns:
        str: The new user's uid.

    Raises:
        https_fn.HttpsError: PERMISSION_DENIED, INVALID_ARGUMENT or
            ALREADY_EXISTS.
    """
    require_privileged(db, caller, "create users")

    if not (
        is_non_empty_string(email)
        and is_non_empty_string(password)
        and is_non_empty_string(role)
    ):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify email, password and role.",
        )

    new_role = parse_role(role)
    if new_role is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Unknown role: {role}.",
        )

    try:
        user_record = auth.create_user(email=email, password=password)
    except auth.EmailAlreadyExistsError:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.ALREADY_EXISTS,
            "The email address is already in use by another account.",
        )
    except ValueError as e:
        # Raised by the Admin SDK for malformed emails or too-short passwords.
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, str(e))

    _write_role(db, user_record.uid, new_role, email)
    logger.info(f"User {user_record.uid} created by {caller.uid} with role {new_role}.")
    return user_record.uid
