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
"""
Email delivery through an HTTP email API, plus an in-memory double.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol

import requests

from shared.config import get_settings
from shared.constants import EMAIL_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str


class EmailClient(Protocol):
    """Defines the operations the dispatcher needs from an email provider."""

    def send(self, message: EmailMessage) -> None:
        ...


@dataclass
class InMemoryEmailClient:
    """Test/emulator double that records messages instead of sending them."""

    sent: List[EmailMessage] = field(default_factory=list)

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)


@dataclass
class HttpEmailClient:
    """
    Client for a Resend-compatible email API: a JSON POST authenticated with
    a bearer API key.
    """

    api_url: str
    api_key: str
    sender: str
    timeout: float = EMAIL_REQUEST_TIMEOUT

    def send(self, message: EmailMessage) -> None:
        response = requests.post(
            self.api_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "from": self.sender,
                "to": [message.to],
                "subject": message.subject,
                "html": message.html,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()


_email_client: EmailClient | None = None


def get_email_client() -> EmailClient:
    global _email_client
    if _email_client:
        return _email_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.email_api_key:
        if not settings.use_in_memory_backends:
            logger.warning("EMAIL_API_KEY is not set; notifications will not be delivered.")
        _email_client = InMemoryEmailClient()
    else:
        _email_client = HttpEmailClient(
            api_url=settings.email_api_url,
            api_key=settings.email_api_key,
            sender=settings.email_sender,
        )
    return _email_client
