from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from app.core.config import config

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.bcrypt_rounds,
)


async def hash_password(password: str) -> str:
    """Hash off the event loop; bcrypt is deliberately slow."""
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(pwd_context.verify, password, password_hash)
