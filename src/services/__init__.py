"""
Services module for the faculty roles dashboard.

The web layer only needs the DashboardService facade; the individual
components are exported for scripts and tests.
"""

from src.services.dashboard_service import (
    DashboardService,
    build_dashboard_service,
    get_dashboard_service,
    reset_dashboard_service,
)
from src.services.listing_reader import ListingReader
from src.services.profile_resolver import ProfileResolver, ResolverStrategy
from src.services.hr_notifier import HRNotifier
from src.services.form_provisioner import FormProvisioner
from src.services.response_collector import ResponseCollector

__all__ = [
    # Facade
    "DashboardService",
    "build_dashboard_service",
    "get_dashboard_service",
    "reset_dashboard_service",
    # Components
    "ListingReader",
    "ProfileResolver",
    "ResolverStrategy",
    "HRNotifier",
    "FormProvisioner",
    "ResponseCollector",
]
