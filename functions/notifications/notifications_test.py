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

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import requests

from notifications import email_client, notifications
from notifications.email_client import EmailMessage, HttpEmailClient, InMemoryEmailClient
from shared.constants import DEFAULT_STATUS_RECIPIENTS
from shared.types import Contract

RECIPIENTS = {
    "Proposta Registrada": "compras@example.com",
    "Documentação Validada": "juridico@example.com",
}


class ShouldNotifyTest(unittest.TestCase):

    def test_creation_always_notifies(self):
        self.assertTrue(notifications.should_notify(None, "Proposta Registrada", created=True))

    def test_update_notifies_only_on_status_change(self):
        self.assertTrue(
            notifications.should_notify("Proposta Registrada", "Documentação Validada")
        )
        self.assertFalse(
            notifications.should_notify("Proposta Registrada", "Proposta Registrada")
        )


class NotifyTest(unittest.TestCase):

    def setUp(self):
        self.client = InMemoryEmailClient()

    def test_mapped_status_sends_one_message(self):
        contract = Contract(
            title="Lease A",
            status="Documentação Validada",
            created_by="alice@example.com",
            last_modified_by="bob@example.com",
        )

        sent = notifications.notify(
            "c1", contract, "Proposta Registrada", self.client, RECIPIENTS
        )

        self.assertTrue(sent)
        self.assertEqual(len(self.client.sent), 1)
        message = self.client.sent[0]
        self.assertEqual(message.to, "juridico@example.com")
        self.assertIn("Lease A", message.subject)
        self.assertIn("Proposta Registrada", message.html)
        self.assertIn("Documentação Validada", message.html)
        self.assertIn("bob@example.com", message.html)

    def test_unmapped_status_sends_nothing(self):
        contract = Contract(title="Lease A", status="Encerrado")

        sent = notifications.notify("c1", contract, "Em Execução", self.client, RECIPIENTS)

        self.assertFalse(sent)
        self.assertEqual(self.client.sent, [])

    def test_missing_status_sends_nothing(self):
        sent = notifications.notify("c1", Contract(title="Lease A"), None, self.client, RECIPIENTS)

        self.assertFalse(sent)
        self.assertEqual(self.client.sent, [])

    def test_delivery_failure_is_swallowed(self):
        failing_client = MagicMock()
        failing_client.send.side_effect = requests.HTTPError("502 Bad Gateway")
        contract = Contract(title="Lease A", status="Proposta Registrada")

        sent = notifications.notify("c1", contract, None, failing_client, RECIPIENTS)

        self.assertFalse(sent)
        failing_client.send.assert_called_once()

    def test_actor_falls_back_to_system(self):
        contract = Contract(title="Lease A", status="Proposta Registrada")

        notifications.notify("c1", contract, None, self.client, RECIPIENTS)

        self.assertIn("Alterado por: System", self.client.sent[0].html)
        self.assertIn("Status anterior: N/A", self.client.sent[0].html)

    def test_link_to_contract(self):
        contract = Contract(title="Lease A", status="Proposta Registrada")

        notifications.notify(
            "c1", contract, None, self.client, RECIPIENTS, app_base_url="https://app.test/"
        )

        self.assertIn('href="https://app.test/contracts/c1"', self.client.sent[0].html)

    def test_default_recipients_cover_validated_documents(self):
        contract = Contract(title="Lease A", status="Documentação Validada")

        notifications.notify(
            "c1", contract, "Proposta Registrada", self.client, DEFAULT_STATUS_RECIPIENTS
        )

        self.assertEqual(
            self.client.sent[0].to, DEFAULT_STATUS_RECIPIENTS["Documentação Validada"]
        )


class HttpEmailClientTest(unittest.TestCase):

    @patch("notifications.email_client.requests.post")
    def test_send_posts_message(self, mock_post):
        client = HttpEmailClient(
            api_url="https://mail.test/emails", api_key="key-123", sender="noreply@test"
        )
        message = EmailMessage(to="juridico@example.com", subject="Hi", html="<p>x</p>")

        client.send(message)

        mock_post.assert_called_once_with(
            "https://mail.test/emails",
            headers={"Authorization": "Bearer key-123"},
            json={
                "from": "noreply@test",
                "to": ["juridico@example.com"],
                "subject": "Hi",
                "html": "<p>x</p>",
            },
            timeout=10,
        )
        mock_post.return_value.raise_for_status.assert_called_once()

    @patch("notifications.email_client.requests.post")
    def test_send_raises_on_http_error(self, mock_post):
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("401")
        client = HttpEmailClient(api_url="https://mail.test", api_key="bad", sender="x")

        with self.assertRaises(requests.HTTPError):
            client.send(EmailMessage(to="a@b.c", subject="s", html="h"))


class GetEmailClientTest(unittest.TestCase):

    def setUp(self):
        email_client._email_client = None

    def tearDown(self):
        email_client._email_client = None

    @patch("notifications.email_client.get_settings")
    def test_without_api_key_uses_in_memory(self, mock_settings):
        mock_settings.return_value = SimpleNamespace(
            use_in_memory_backends=False, email_api_key=None
        )

        self.assertIsInstance(email_client.get_email_client(), InMemoryEmailClient)

    @patch("notifications.email_client.get_settings")
    def test_with_api_key_uses_http(self, mock_settings):
        mock_settings.return_value = SimpleNamespace(
            use_in_memory_backends=False,
            email_api_key="key",
            email_api_url="https://mail.test",
            email_sender="noreply@test",
        )

        client = email_client.get_email_client()

        self.assertIsInstance(client, HttpEmailClient)
        self.assertIs(email_client.get_email_client(), client)


if __name__ == "__main__":
    unittest.main()
