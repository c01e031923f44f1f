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

from typing import Any

# Firestore reserves these as path components.
_RESERVED_DOCUMENT_IDS = frozenset({".", ".."})


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def is_document_id(value: Any) -> bool:
    """
    True for a single Firestore path segment. A value containing "/" would
    address a different collection or document than the one it names.
    """
    return (
        is_non_empty_string(value)
        and "/" not in value
        and value not in _RESERVED_DOCUMENT_IDS
    )
