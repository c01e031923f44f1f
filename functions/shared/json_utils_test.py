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

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.json_utils import convert_keys, to_firestore_dict
from shared.types import AuditEntry, Contract


class JsonUtilsTest(unittest.TestCase):

    def test_convert_keys_nested(self):
        data = {
            "costCenter": "CC-1",
            "attachments": [{"storagePath": "a/b", "fileName": "x.pdf"}],
        }

        snake = convert_keys(data, "camel_to_snake")

        self.assertEqual(
            snake,
            {
                "cost_center": "CC-1",
                "attachments": [{"storage_path": "a/b", "file_name": "x.pdf"}],
            },
        )
        self.assertEqual(convert_keys(snake, "snake_to_camel"), data)

    def test_convert_keys_unknown_direction(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "kebab")

    def test_to_firestore_dict_keeps_server_timestamp(self):
        entry = AuditEntry(
            action="Status Alterado", details="A -> B", user="bob", timestamp=SERVER_TIMESTAMP
        )

        data = to_firestore_dict(entry)

        self.assertEqual(
            set(data.keys()), {"action", "details", "user", "timestamp"}
        )
        self.assertIs(data["timestamp"], SERVER_TIMESTAMP)

    def test_contract_actor_fallbacks(self):
        self.assertEqual(
            Contract(created_by="alice", last_modified_by="bob").actor, "bob"
        )
        self.assertEqual(Contract(created_by="alice").actor, "alice")
        self.assertEqual(Contract().actor, "System")


if __name__ == "__main__":
    unittest.main()
