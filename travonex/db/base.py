# Import all models so Base.metadata sees every table (Alembic, create_all in tests)
from travonex.db.session import Base  # noqa: F401
from travonex.models.user import User  # noqa: F401
from travonex.models.wallet_transaction import WalletTransaction  # noqa: F401
from travonex.models.organizer import Organizer  # noqa: F401
from travonex.models.trip import Trip  # noqa: F401
from travonex.models.trip_batch import TripBatch  # noqa: F401
from travonex.models.cancellation_rule import CancellationRule  # noqa: F401
from travonex.models.promo_code import PromoCode  # noqa: F401
from travonex.models.booking import Booking  # noqa: F401
from travonex.models.traveler import Traveler  # noqa: F401
from travonex.models.cancellation import Cancellation  # noqa: F401
from travonex.models.audit_log import AuditLog  # noqa: F401
from travonex.models.lead import Lead  # noqa: F401
from travonex.models.lead_package import LeadPackage  # noqa: F401
from travonex.models.lead_purchase import LeadPurchase  # noqa: F401
from travonex.models.lead_unlock import LeadUnlock  # noqa: F401
