import asyncio
import sys

from pydantic import ValidationError

from app.core.enums import UserRole
from app.core.security import hash_password
from app.db.init_db import create_tables
from app.db.session import AsyncSessionLocal, engine
from app.repositories.users import UserRepository
from app.schemas.user import UserCreate


async def create_user(name: str, email: str, password: str, role: UserRole) -> bool:
    try:
        user = UserCreate(
            name=name,
            email=email,
            role=role,
            password=password,
            password_confirmation=password,
        )
    except ValidationError as e:
        print(f"Error: {e}")
        return False

    try:
        await create_tables(engine)
        async with AsyncSessionLocal() as db:
            repo = UserRepository(db)
            if await repo.existing_emails([str(user.email)]):
                print(f"Error: User '{user.email}' already exists")
                return False

            await repo.insert_many([{
                "name": user.name,
                "email": str(user.email),
                "role": user.role,
                "password_hash": hash_password(user.password),
            }])
            await db.commit()
    finally:
        await engine.dispose()

    print(f"User '{user.email}' created successfully")
    print(f"Role: {user.role}")
    return True


def main():
    if len(sys.argv) < 4:
        print("Usage: python create_user.py <name> <email> <password> [role]")
        sys.exit(1)

    name, email, password = sys.argv[1:4]
    role = sys.argv[4] if len(sys.argv) > 4 else UserRole.PROJECT_MANAGER.value

    if role not in {r.value for r in UserRole}:
        print(f"Error: role must be one of {', '.join(r.value for r in UserRole)}")
        sys.exit(1)

    success = asyncio.run(create_user(name, email, password, UserRole(role)))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
