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

USER_ROLES_COLLECTION = "userRoles"
CONFIG_COLLECTION = "config"
SETUP_CONFIG_DOCUMENT = "setup"

CONTRACTS_COLLECTION = "contracts"
ATTACHMENTS_COLLECTION = "attachments"
AUDIT_LOG_COLLECTION = "auditLog"
DELETED_CONTRACTS_COLLECTION = "deletedContracts"

# Document path pattern used by the contract triggers.
CONTRACT_DOCUMENT_PATH = CONTRACTS_COLLECTION + "/{contractId}"
