"""Domain models package for the AgriShield automation service.

All models are immutable Pydantic v2 models with strict validation.
"""

from .automation import AutomationResult, BreachKind, ThresholdBreach, WeatherAggregate
from .base import BaseModelConfig, IdentifiableModel
from .claim import (
    Claim,
    ClaimFilter,
    ClaimStatus,
    ClaimTransitionRequest,
    TransitionDetails,
)
from .context import RequestContext, UserRole
from .dashboard import DashboardSummary
from .farmer import FarmerProfile, FarmerWithFarms, FarmProfile
from .policy import (
    AutomationConfig,
    EligiblePolicy,
    PaymentStatus,
    PolicyClaimStatus,
    PolicyFilter,
    PolicyProduct,
    PolicyProductCreate,
    UserPolicy,
)
from .weather import (
    FarmLocation,
    WeatherObservation,
    WeatherObservationCreate,
    WeatherStats,
)

__all__ = [
    # Base models
    "BaseModelConfig",
    "IdentifiableModel",
    # Catalog and policies
    "AutomationConfig",
    "EligiblePolicy",
    "PaymentStatus",
    "PolicyClaimStatus",
    "PolicyFilter",
    "PolicyProduct",
    "PolicyProductCreate",
    "UserPolicy",
    # Claims
    "Claim",
    "ClaimFilter",
    "ClaimStatus",
    "ClaimTransitionRequest",
    "TransitionDetails",
    # Weather
    "FarmLocation",
    "WeatherObservation",
    "WeatherObservationCreate",
    "WeatherStats",
    # Farmers
    "FarmProfile",
    "FarmerProfile",
    "FarmerWithFarms",
    # Automation
    "AutomationResult",
    "BreachKind",
    "ThresholdBreach",
    "WeatherAggregate",
    # Context and reporting
    "DashboardSummary",
    "RequestContext",
    "UserRole",
]
