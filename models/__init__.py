"""SQLAlchemy models; importing the package registers every table on Base.metadata."""
from models.base_model import Base
from models.cart import Cart
from models.session import Session
from models.user import User
