import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.sql import func

from app.database import create_tables, upsert
from app.models import User
from app.schemas import GoogleUserInfo

logger = logging.getLogger(__name__)


async def upsert_user(sessionmaker: Optional[async_sessionmaker], info: GoogleUserInfo) -> bool:
    """Record a login. Best effort: failures are logged and reported as False."""
    if sessionmaker is None:
        return False
    try:
        async with sessionmaker() as db:
            await create_tables(db.bind, tables=[User.__table__])
            await db.execute(
                upsert(
                    db.bind,
                    User,
                    {
                        "user_id": info.id,
                        "email": info.email,
                        "name": info.name,
                        "picture": info.picture or None,
                        "last_login": func.now(),
                    },
                    index_elements=["user_id"],
                    update_columns=["email", "name", "picture", "last_login"],
                )
            )
            await db.commit()
    except Exception as e:
        # login proceeds whatever the database does
        logger.exception(f"Failed to store user {info.id}: {e}")
        return False
    return True
