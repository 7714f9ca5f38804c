"""Services for the SoundVault catalog."""
from .access_service import MediaAccessService, MediaStream
from .account_service import AccountService
from .admin_service import AdminManagementService
from .catalog_service import CatalogQueryService
from .ingestion_service import MediaIngestionService
from .pagination import Page, PageRequest

__all__ = [
    "AccountService",
    "AdminManagementService",
    "CatalogQueryService",
    "MediaAccessService",
    "MediaIngestionService",
    "MediaStream",
    "Page",
    "PageRequest",
]
