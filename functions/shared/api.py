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

from dataclasses import dataclass, field
from typing import List


@dataclass
class CreateUserResult:
    success: bool
    uid: str


@dataclass
class NewAttachment:
    """Attachment metadata as returned to the client after an upload."""

    id: str
    file_name: str
    storage_path: str
    url: str
    uploaded_by: str
    uploaded_at: str  # ISO 8601; the stored record uses the server timestamp


@dataclass
class UploadFileResult:
    success: bool
    new_attachment: NewAttachment


@dataclass
class DeleteFileResult:
    success: bool


@dataclass
class ArchivalResult:
    success: bool
    message: str
    attachments_archived: int = 0
    audit_entries_archived: int = 0
    orphaned_files: List[str] = field(default_factory=list)
