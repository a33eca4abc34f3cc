"""Vendor domain service."""

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.entities import Vendor
from ledgerbook.domain.errors import ConflictError, ValidationError
from ledgerbook.domain.identity import IdentityProvider


class VendorService:
    """Service for managing vendors."""

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        self.db = db
        self.identity = identity
        self.activity = ActivityLogService(db)

    def create_vendor(self, name: str) -> int:
        """Create a vendor and return its ID.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a vendor with that name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Vendor name is required", field="name")
        if self.db.read_live(Collection.VENDORS, {"name": name}):
            raise ConflictError(f"Vendor '{name}' already exists")

        vendor = self.db.create(Collection.VENDORS, Vendor(id=None, name=name))
        self.activity.record(self.identity.current_actor(), f"Added vendor: {name}")
        return vendor.id

    def list_vendors(self) -> list[Vendor]:
        return sorted(self.db.read_all(Collection.VENDORS), key=lambda vendor: vendor.name)
