# External collaborators
from clients.config import InvoiceApiConfig, load_invoice_api_config
from clients.invoice_api_client import InvoiceApiClient
