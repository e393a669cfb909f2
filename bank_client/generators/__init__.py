"""Demo data generators."""

from bank_client.generators.account import AccountGenerator
from bank_client.generators.base import BaseGenerator

__all__ = ["AccountGenerator", "BaseGenerator"]
