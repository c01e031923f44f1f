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
Configuration and settings for the contract functions.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import DEFAULT_STATUS_RECIPIENTS


class Settings(BaseSettings):
    """Environment-backed settings, read once per function instance."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # The single web origin allowed to call the HTTP endpoints.
    cors_origin: str = Field(default="http://localhost:5173")

    # Defaults to the project's bucket when unset.
    storage_bucket: Optional[str] = Field(default=None)

    # Email delivery API (Resend-compatible JSON endpoint)
    email_api_url: str = Field(default="https://api.resend.com/emails")
    email_api_key: Optional[str] = Field(default=None)
    email_sender: str = Field(default="Gestão de Contratos <noreply@example.com>")

    # Contract status -> recipient address. Set STATUS_RECIPIENTS to a JSON
    # object to override.
    status_recipients: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_STATUS_RECIPIENTS)
    )

    # Used to link to the contract from notification emails.
    app_base_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
