"""
Shared fixtures: in-memory SQLite database, fast bcrypt, and a local RSA
key standing in for Google's signing keys.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-jwt-secret-with-enough-length-0123456789"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

import time  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import httpx  # noqa: E402
import jwt as pyjwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from auth.dependencies import get_google_decoder, get_token_service  # noqa: E402
from auth.google import GoogleTokenDecoder  # noqa: E402
from auth.identity_store import IdentityStore  # noqa: E402
from auth.jwt import TokenService  # noqa: E402
from auth.password import PasswordPolicy  # noqa: E402
from auth.service import AuthService  # noqa: E402
from config.settings import config  # noqa: E402
from database.models import Base  # noqa: E402
from database.session import get_db_session  # noqa: E402
from main import app  # noqa: E402

GOOGLE_CLIENT_ID = config.google_client_id
GOOGLE_ISSUER = "https://accounts.google.com"


@pytest.fixture(scope="session")
def google_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def make_google_token(google_key):
    """Build a Google-style ID token signed with the test key."""

    def _make(email: str = "bob@example.com", *, key=None, **overrides) -> str:
        now = int(time.time())
        claims = {
            "iss": GOOGLE_ISSUER,
            "aud": GOOGLE_CLIENT_ID,
            "sub": "1098765432",
            "email": email,
            "email_verified": True,
            "given_name": "Bob",
            "family_name": "Builder",
            "iat": now,
            "exp": now + 600,
        }
        claims.update(overrides)
        claims = {k: v for k, v in claims.items() if v is not None}
        return pyjwt.encode(claims, key or google_key, algorithm="RS256")

    return _make


@pytest.fixture
def google_decoder(google_key) -> GoogleTokenDecoder:
    public_key = google_key.public_key()
    return GoogleTokenDecoder(GOOGLE_CLIENT_ID, key_resolver=lambda _token: public_key)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService()


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db) -> IdentityStore:
    return IdentityStore(db, PasswordPolicy.from_settings())


@pytest.fixture
def service(store, token_service, google_decoder) -> AuthService:
    return AuthService(store, token_service, google_decoder)


@pytest_asyncio.fixture
async def client(session_factory, google_decoder, token_service) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_google_decoder] = lambda: google_decoder
    app.dependency_overrides[get_token_service] = lambda: token_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()
