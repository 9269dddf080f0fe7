from .db import db
from .user import User
from .audit_log import AuditLog
from .session import Session
from .court import Court
from .booking import Booking
from .post import Post, Reply
from .tournament import Tournament, Registration
