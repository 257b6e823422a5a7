# Import all models here so SQLAlchemy registers them into Base.metadata.

from quicksell_admin.models.user import User  # noqa: F401
from quicksell_admin.models.listing import Listing  # noqa: F401
from quicksell_admin.models.marketplace import EbayListing, MarketplaceAccount  # noqa: F401
from quicksell_admin.models.activity import AdminActivityLog  # noqa: F401
