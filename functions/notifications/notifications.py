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

import html
import logging
from typing import Mapping, Optional

from notifications.email_client import EmailClient, EmailMessage
from shared.constants import NOT_APPLICABLE
from shared.types import Contract

logger = logging.getLogger(__name__)


def should_notify(
    before_status: Optional[str], after_status: Optional[str], created: bool = False
) -> bool:
    """Every new contract notifies; an update notifies only on a status change."""
    if created:
        return True
    return before_status != after_status


def build_message(
    contract_id: str,
    contract: Contract,
    previous_status: Optional[str],
    recipient: str,
    app_base_url: Optional[str] = None,
) -> EmailMessage:
    title = contract.title or NOT_APPLICABLE
    subject = f"Contrato '{title}': {contract.status}"

    lines = [
        f"<p>O contrato <strong>{html.escape(title)}</strong> mudou de status.</p>",
        "<ul>",
        f"<li>Status anterior: {html.escape(previous_status or NOT_APPLICABLE)}</li>",
        f"<li>Novo status: {html.escape(contract.status or NOT_APPLICABLE)}</li>",
        f"<li>Alterado por: {html.escape(contract.actor)}</li>",
        "</ul>",
    ]
    if app_base_url:
        link = f"{app_base_url.rstrip('/')}/contracts/{contract_id}"
        lines.append(f'<p><a href="{html.escape(link)}">Abrir contrato</a></p>')

    return EmailMessage(to=recipient, subject=subject, html="\n".join(lines))


def notify(
    contract_id: str,
    contract: Contract,
    previous_status: Optional[str],
    email_client: EmailClient,
    recipients: Mapping[str, str],
    app_base_url: Optional[str] = None,
) -> bool:
    """
    Emails the recipient mapped to the contract's current status.

    Delivery is best-effort: failures are logged and never raised, so they
    cannot affect the write that triggered the notification.

    Args:
        contract_id (str): The contract's document id.
        contract (Contract): The contract after the change.
        previous_status (str | None): The status before the change, None on
            creation.
        email_client (EmailClient): Where to send the message.
        recipients (Mapping[str, str]): Status label -> recipient address.
        app_base_url (str | None): When set, the email links to the contract.

    Returns:
        bool: True if a message was handed to the email client.
    """
    recipient = recipients.get(contract.status) if contract.status else None
    if not recipient:
        logger.info(
            f"No recipient configured for status '{contract.status}' "
            f"(contract {contract_id}). Skipping notification."
        )
        return False

    message = build_message(
        contract_id, contract, previous_status, recipient, app_base_url
    )
    try:
        email_client.send(message)
    except Exception as e:
        logger.error(f"Failed to send notification for contract {contract_id}: {e}")
        return False

    logger.info(f"Notification for contract {contract_id} sent to {recipient}.")
    return True
