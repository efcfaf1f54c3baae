"""Invoice API client configuration."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class InvoiceApiConfig(BaseModel):
    """
    Connection settings for the Invoice API.

    Has no retry setting. Issue and cancel are never retried automatically.
    """

    base_url: str = Field(
        ...,
        min_length=1,
        description="Scheme and host of the back-office API, e.g. https://api.example.com",
    )
    api_prefix: str = Field(
        default="/api",
        description="Path prefix in front of /invoices",
    )
    timeout_seconds: float = Field(
        default=10,
        description="Per-request timeout",
        ge=1,
        le=120,
    )

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_prefix}{path}"


def load_invoice_api_config() -> InvoiceApiConfig:
    """
    Build config from the environment (a local .env file is loaded first).

    Raises:
        ValueError: If INVOICE_API_BASE_URL is not set
    """
    load_dotenv()

    base_url = os.getenv("INVOICE_API_BASE_URL")
    if not base_url:
        raise ValueError("INVOICE_API_BASE_URL environment variable is required")

    kwargs = {"base_url": base_url}
    if os.getenv("INVOICE_API_PREFIX") is not None:
        kwargs["api_prefix"] = os.getenv("INVOICE_API_PREFIX")
    if os.getenv("INVOICE_API_TIMEOUT_SECONDS"):
        kwargs["timeout_seconds"] = float(os.getenv("INVOICE_API_TIMEOUT_SECONDS"))

    return InvoiceApiConfig(**kwargs)
