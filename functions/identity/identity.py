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
from dataclasses import dataclass
from typing import Optional

from firebase_admin import auth
from firebase_functions import https_fn

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass
class CallerIdentity:
    """The verified identity behind an Authorization header."""

    uid: str
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.email or self.uid


def _unauthenticated(message: str) -> https_fn.HttpsError:
    return https_fn.HttpsError(https_fn.FunctionsErrorCode.UNAUTHENTICATED, message)


def resolve_caller(authorization_header: Optional[str]) -> CallerIdentity:
    """
    Verifies the bearer ID token in an Authorization header.

    Args:
        authorization_header (str | None): The raw header value, e.g.
            "Bearer <token>".

    Returns:
        CallerIdentity: The uid and email carried by the verified token.

    Raises:
        https_fn.HttpsError: UNAUTHENTICATED if the header is missing or
            malformed, or the token fails verification.
    """
    if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
        raise _unauthenticated("Missing or malformed Authorization header.")

    token = authorization_header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise _unauthenticated("Missing ID token.")

    try:
        decoded_token = auth.verify_id_token(token)
    except (auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"Rejected ID token: {e}")
        raise _unauthenticated("Invalid or expired ID token.")

    return CallerIdentity(uid=decoded_token["uid"], email=decoded_token.get("email"))
