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
from unittest.mock import patch

from firebase_admin import auth
from firebase_functions import https_fn

from identity import identity


class ResolveCallerTest(unittest.TestCase):

    def assertUnauthenticated(self, header):
        with self.assertRaises(https_fn.HttpsError) as ctx:
            identity.resolve_caller(header)
        self.assertEqual(
            ctx.exception.code, https_fn.FunctionsErrorCode.UNAUTHENTICATED
        )

    @patch("identity.identity.auth.verify_id_token")
    def test_missing_or_malformed_header(self, mock_verify):
        self.assertUnauthenticated(None)
        self.assertUnauthenticated("")
        self.assertUnauthenticated("Basic abc123")
        self.assertUnauthenticated("Bearer    ")
        mock_verify.assert_not_called()

    @patch("identity.identity.auth.verify_id_token")
    def test_rejected_token(self, mock_verify):
        mock_verify.side_effect = auth.InvalidIdTokenError("Token expired")
        self.assertUnauthenticated("Bearer expired-token")
        mock_verify.assert_called_once_with("expired-token")

    @patch("identity.identity.auth.verify_id_token")
    def test_malformed_token(self, mock_verify):
        mock_verify.side_effect = ValueError("Illegal ID token provided")
        self.assertUnauthenticated("Bearer not-a-jwt")

    @patch("identity.identity.auth.verify_id_token")
    def test_valid_token(self, mock_verify):
        mock_verify.return_value = {"uid": "u1", "email": "u1@example.com"}

        caller = identity.resolve_caller("Bearer good-token")

        self.assertEqual(caller.uid, "u1")
        self.assertEqual(caller.email, "u1@example.com")
        self.assertEqual(caller.display_name, "u1@example.com")

    @patch("identity.identity.auth.verify_id_token")
    def test_token_without_email(self, mock_verify):
        mock_verify.return_value = {"uid": "u2"}

        caller = identity.resolve_caller("Bearer good-token")

        self.assertIsNone(caller.email)
        self.assertEqual(caller.display_name, "u2")


if __name__ == "__main__":
    unittest.main()
