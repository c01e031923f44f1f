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

from shared import validation


class ValidationTest(unittest.TestCase):

    def test_is_non_empty_string(self):
        self.assertTrue(validation.is_non_empty_string("a.pdf"))
        self.assertFalse(validation.is_non_empty_string(""))
        self.assertFalse(validation.is_non_empty_string(None))
        self.assertFalse(validation.is_non_empty_string(123))
        self.assertFalse(validation.is_non_empty_string(["a"]))

    def test_is_document_id(self):
        self.assertTrue(validation.is_document_id("c1"))
        self.assertTrue(validation.is_document_id("AbC-123_x"))
        self.assertFalse(validation.is_document_id("c1/auditLog/x"))
        self.assertFalse(validation.is_document_id("a/b"))
        self.assertFalse(validation.is_document_id(".."))
        self.assertFalse(validation.is_document_id(""))
        self.assertFalse(validation.is_document_id(7))


if __name__ == "__main__":
    unittest.main()
