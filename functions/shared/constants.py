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

NOT_APPLICABLE = "N/A"
SYSTEM_ACTOR = "System"

ACTION_CONTRACT_CREATED = "Contract Created"
ACTION_ATTACHMENT_ADDED = "Attachment Added"
ACTION_ATTACHMENT_REMOVED = "Attachment Removed"

# (snake_case field on Contract, audit action label), in the order the entries
# are written.
TRACKED_FIELDS = [
    ("status", "Status Alterado"),
    ("title", "Título Alterado"),
    ("contracted_party", "Parte Contratada Alterada"),
    ("total_value", "Valor Total Alterado"),
    ("sector", "Setor Alterado"),
    ("cost_center", "Centro de Custo Alterado"),
]

DEFAULT_STATUS_RECIPIENTS = {
    "Proposta Registrada": "compras@example.com",
    "Documentação Validada": "juridico@example.com",
    "Análise Jurídica": "juridico@example.com",
    "Aguardando Assinatura": "diretoria@example.com",
    "Contrato Assinado": "financeiro@example.com",
}

EMAIL_REQUEST_TIMEOUT = 10  # seconds

# Firestore rejects batches with more writes than this.
MAX_BATCH_WRITES = 500
