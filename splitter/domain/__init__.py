"""Domain models and identity helpers used across application layer boundaries."""

from .identity import ZERO_IDENTITY, domain_identity_is_null, domain_normalize_identity
from .models import HealthStatus

__all__ = ["HealthStatus", "ZERO_IDENTITY", "domain_identity_is_null", "domain_normalize_identity"]
