from .health import health_bp
from .auth import auth_bp
from .profiles import profile_bp
from .courts import court_bp
from .booking import booking_bp
from .community import community_bp
from .tournaments import tournament_bp
from .events import events_bp
