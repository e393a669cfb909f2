"""Client for the banking HTTP API."""

from bank_client.api.client import BankApiClient, map_error

__all__ = ["BankApiClient", "map_error"]
