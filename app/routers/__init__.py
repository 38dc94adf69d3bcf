# Driving School Matching - Routers Package
from app.routers import health, matching, reports

__all__ = ["health", "matching", "reports"]
