"""Category domain service."""

from typing import Optional

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.entities import Category, CategoryType
from ledgerbook.domain.errors import ConflictError, ValidationError
from ledgerbook.domain.identity import IdentityProvider

TRANSFER_CATEGORY = "Funds Transfer"
STOCK_PURCHASE_CATEGORY = "Stock Purchase"
STOCK_SALE_CATEGORY = "Stock Sale"

# Categories the ledger itself writes; always recognized for both ledgers.
SYSTEM_CATEGORIES = frozenset({TRANSFER_CATEGORY, STOCK_PURCHASE_CATEGORY, STOCK_SALE_CATEGORY})

# Default categories, as (name, type)
INITIAL_CATEGORIES = [
    ("Sales", CategoryType.CASH),
    ("Rent", CategoryType.CASH),
    ("Salary", CategoryType.CASH),
    ("Utilities", CategoryType.CASH),
    ("Transport", CategoryType.CASH),
    ("Miscellaneous", CategoryType.CASH),
    ("Sales", CategoryType.BANK),
    ("Rent", CategoryType.BANK),
    ("Salary", CategoryType.BANK),
    ("Utilities", CategoryType.BANK),
    ("Bank Charges", CategoryType.BANK),
    ("Miscellaneous", CategoryType.BANK),
]


class CategoryService:
    """Service for managing the recognized category set of each ledger."""

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        """Initialize category service.

        Args:
            db: Record store instance
            identity: Provider of the acting user
        """
        self.db = db
        self.identity = identity
        self.activity = ActivityLogService(db)

    def create_category(self, name: str, category_type: CategoryType) -> int:
        """Create a category.

        Args:
            name: Category name
            category_type: Ledger the category belongs to

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is blank or reserved
            ConflictError: If the category already exists for that ledger
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required", field="name")
        if name in SYSTEM_CATEGORIES:
            raise ValidationError(f"Category '{name}' is reserved", field="name")
        if self.get_category(name, category_type) is not None:
            raise ConflictError(f"Category '{name}' already exists for {category_type.value}")

        category = self.db.create(
            Collection.CATEGORIES, Category(id=None, name=name, type=category_type)
        )
        self.activity.record(
            self.identity.current_actor(), f"Added {category_type.value} category: {name}"
        )
        return category.id

    def get_category(self, name: str, category_type: CategoryType) -> Optional[Category]:
        """Get a user category by name and ledger type."""
        matches = self.db.read_live(Collection.CATEGORIES, {"name": name, "type": category_type})
        return matches[0] if matches else None

    def list_categories(self, category_type: Optional[CategoryType] = None) -> list[Category]:
        """List user categories, optionally for one ledger."""
        filters = {"type": category_type} if category_type is not None else None
        categories = self.db.read_live(Collection.CATEGORIES, filters)
        return sorted(categories, key=lambda cat: (cat.type.value, cat.name))

    def recognized_names(self, category_type: CategoryType) -> set[str]:
        """Return every category name a transaction of that ledger may use."""
        names = {cat.name for cat in self.list_categories(category_type)}
        return names | SYSTEM_CATEGORIES

    def is_recognized(self, name: str, category_type: CategoryType) -> bool:
        return name in SYSTEM_CATEGORIES or self.get_category(name, category_type) is not None

    def init_defaults(self) -> int:
        """Create the default categories that do not exist yet.

        Returns:
            Number of categories created
        """
        created = 0
        for name, category_type in INITIAL_CATEGORIES:
            if self.get_category(name, category_type) is None:
                self.db.create(Collection.CATEGORIES, Category(id=None, name=name, type=category_type))
                created += 1
        if created:
            self.activity.record(
                self.identity.current_actor(), f"Initialized {created} default categories."
            )
        return created
