from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel
from marketplace.repos.user_repo import UserRepo
from marketplace.domain.errors import NotFound
from marketplace.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_by_username(payload.username)
        if existing:
            return UserRead(id=existing.id, username=existing.username)

        created = self.repo.create_user(UserModel(username=payload.username))
        return UserRead(id=created.id, username=created.username)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound(f"Uzytkownik {user_id} nie istnieje")
        return UserRead(id=user.id, username=user.username)
