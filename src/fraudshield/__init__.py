"""fraudshield: community trust scores and scam checks for small businesses."""

__version__ = "0.1.0"

# Public API
from .community import CommunityService
from .errors import FraudShieldError, StorageError, ValidationError
from .models import AdverseReport, EntityType, RiskAssessment, TrustRecord
from .risk import RiskAssessor
from .trust import TrustScoreEngine

__all__ = [
    "AdverseReport",
    "CommunityService",
    "EntityType",
    "FraudShieldError",
    "RiskAssessment",
    "RiskAssessor",
    "StorageError",
    "TrustRecord",
    "TrustScoreEngine",
    "ValidationError",
    "__version__",
]
