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
from enum import StrEnum
from typing import Any, List, Optional

from shared.constants import SYSTEM_ACTOR


class Role(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class ContractStatus(StrEnum):
    """Contract lifecycle labels, in lifecycle order."""

    PROPOSTA_REGISTRADA = "Proposta Registrada"
    DOCUMENTACAO_VALIDADA = "Documentação Validada"
    ANALISE_JURIDICA = "Análise Jurídica"
    AGUARDANDO_ASSINATURA = "Aguardando Assinatura"
    CONTRATO_ASSINADO = "Contrato Assinado"
    EM_EXECUCAO = "Em Execução"
    ENCERRADO = "Encerrado"


class ArchivalPhase(StrEnum):
    REQUESTED = "Requested"
    AUTHORIZED = "Authorized"
    SNAPSHOTTED = "Snapshotted"
    ARCHIVED = "Archived"
    PURGED = "Purged"


@dataclass
class UserRole:
    """Schema for documents in the userRoles collection, keyed by uid."""

    role: str
    email: Optional[str]
    created_at: Any  # Firestore timestamp (firestore_v1.SERVER_TIMESTAMP on write)


@dataclass
class SetupConfig:
    """One-shot record marking that the first administrator was assigned."""

    initial_admin_assigned: bool
    initial_admin_uid: str
    completed_at: Any


@dataclass
class Contract:
    title: Optional[str] = None
    status: Optional[str] = None
    contracted_party: Optional[str] = None
    total_value: Optional[Any] = None
    sector: Optional[str] = None
    cost_center: Optional[str] = None
    created_by: Optional[str] = None
    last_modified_by: Optional[str] = None

    @property
    def actor(self) -> str:
        """Who made the latest change, as shown in emails and the audit log."""
        return self.last_modified_by or self.created_by or SYSTEM_ACTOR


@dataclass
class Attachment:
    file_name: str
    storage_path: str
    url: str
    uploaded_by: str
    uploaded_at: Any


@dataclass
class AuditEntry:
    action: str
    details: str
    user: str
    timestamp: Any


@dataclass
class ArchivedContract:
    """
    Frozen copy of a deleted contract. The contract's own fields are stored
    alongside these at the top level of the archive document.
    """

    attachments: List[dict] = field(default_factory=list)
    audit_log: List[dict] = field(default_factory=list)
    deleted_by: Optional[str] = None
    deleted_at: Any = None
