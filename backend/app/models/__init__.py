from app.models.bid import Bid  # noqa: F401
from app.models.gig import Gig  # noqa: F401
from app.models.user import User  # noqa: F401
