from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel, ROLE_SELLER
from marketplace.repos.user_repo import UserRepo
from marketplace.domain.schemas import UserCreate, UserUpdate, UserRead
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(**payload.model_dump())
        if user.role != ROLE_SELLER:
            user.promptpay_qr_url = None

        created = self.repo.create_user(user)
        logger.info(f"Created {created.role} profile {created.id}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")
        return UserRead.model_validate(user)

    def update_user(self, user_id: str, caller_id: str, payload: UserUpdate) -> UserRead:
        if user_id != caller_id:
            raise PermissionError("Cannot edit another user's profile")

        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field in ("username", "email", "address", "phone"):
                continue
            setattr(user, field, value)

        #a payment QR belongs to sellers only
        if user.role != ROLE_SELLER:
            user.promptpay_qr_url = None

        saved = self.repo.save(user)
        logger.info(f"Updated profile {user_id}")
        return UserRead.model_validate(saved)
