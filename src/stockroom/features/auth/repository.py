from ...common.repository import BaseRepository
from .models import User
from .schemas import UserRow


class UserRepository(BaseRepository[User, UserRow]):
    model = User
    row_schema = UserRow
    default_order = "last_name"
