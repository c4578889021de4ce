from httpx import AsyncClient
from sqlalchemy import func, select

from leasehub.core.database import Database
from leasehub.core.security import get_password_hash
from leasehub.models.enums import Role
from leasehub.models.user import User

API = "/api/v1"
PASSWORD = "s3cret-pass"


async def register(client: AsyncClient, email: str, name: str = "Test User", **extra):
    payload = {"name": name, "email": email, "phone": "555-0100", "password": PASSWORD}
    payload.update(extra)
    return await client.post(f"{API}/users/register", json=payload)


async def sign_in(client: AsyncClient, email: str, name: str = "Test User") -> dict:
    """Register with autoLogin and return the user body."""
    response = await register(client, email, name=name, autoLogin=True)
    assert response.status_code == 201, response.text
    assert response.json()["signedIn"] is True
    return response.json()["user"]


async def list_vehicle(client: AsyncClient, license: str = "ABC123", lease_price: float = 300, **extra):
    payload = {"make": "Toyota", "model": "Camry", "year": 2022, "license": license, "leasePrice": lease_price}
    payload.update(extra)
    return await client.post(f"{API}/vehicles", json=payload)


async def count_rows(database: Database, model, *criteria) -> int:
    async with database.session_maker() as session:
        result = await session.execute(select(func.count()).select_from(model).where(*criteria))
        return result.scalar_one()


async def fetch_one(database: Database, model, *criteria):
    async with database.session_maker() as session:
        result = await session.execute(select(model).where(*criteria))
        return result.scalars().first()


async def create_admin(database: Database, email: str = "admin@example.com") -> User:
    async with database.session_maker() as session:
        admin = User(
            name="Admin",
            email=email,
            phone="5550000",
            password_hash=get_password_hash(PASSWORD),
            role=Role.admin.value,
        )
        session.add(admin)
        await session.commit()
        return admin
