"""Initial data for a freshly created database."""

import os
import secrets
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@blueflagrealty.com"
BCRYPT_ROUNDS = 10

SAMPLE_BLOG = {
    "title": "Welcome to Blue Flag Indianapolis",
    "content": "<p>Welcome to our new real estate website! Here you will find the latest listings.</p>",
    "excerpt": "Welcome to our new real estate website!",
    "isPublished": True,
}

SAMPLE_DEAL = {
    "title": "Downtown Investment Opportunity",
    "content": "<p>Exclusive off-market opportunity in downtown Indianapolis.</p>",
    "propertyType": "Residential",
    "area": "Downtown Indianapolis",
    "status": "Available",
    "isActive": True,
}


@dataclass
class SeedResult:
    """What a seeding pass did."""
    admin: str = ""  # created, updated or failed
    generated_password: Optional[str] = None
    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)  # Samples already present
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """bcrypt hash in the ``$2b$`` format the web application verifies."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class DatabaseSeeder:
    """
    Seeds an admin account, a sample blog post and a sample off-market deal.

    Each seed runs on its own; a failure is logged and recorded and the
    remaining seeds still run. A sample row is only inserted when no row
    with the same title exists, so running the seeder twice is harmless.
    """

    def __init__(
        self,
        database,
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
    ):
        """
        Initialize the seeder.

        Args:
            database: Database facade to write through
            admin_email: Admin login, defaults to ADMIN_EMAIL or the built-in address
            admin_password: Admin password, defaults to ADMIN_PASSWORD. When
                neither is set a random password is generated and printed once.
        """
        self.database = database
        self.admin_email = admin_email or os.environ.get("ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL
        self.admin_password = admin_password or os.environ.get("ADMIN_PASSWORD")

    async def seed(self) -> SeedResult:
        """Run every seed."""
        result = SeedResult()

        try:
            result.admin = await self.seed_admin(result)
        except Exception as e:
            result.admin = "failed"
            result.errors.append({"seed": "admin", "error": str(e)})
            logger.error(f"Error creating admin user: {e}")

        for name, table, values in (
            ("blog", "blogs", SAMPLE_BLOG),
            ("off_market_deal", "off_market_deals", SAMPLE_DEAL),
        ):
            try:
                if await self.insert_sample(table, values):
                    result.created.append(name)
                    logger.info(f"Sample {name} created")
                else:
                    result.existing.append(name)
                    logger.info(f"Sample {name} already present")
            except Exception as e:
                result.errors.append({"seed": name, "error": str(e)})
                logger.error(f"Error creating sample {name}: {e}")

        return result

    async def seed_admin(self, result: Optional[SeedResult] = None) -> str:
        """
        Create the admin account, or reset its password and role if it exists.

        Returns:
            "created" or "updated"
        """
        password = self.admin_password
        if not password:
            password = secrets.token_urlsafe(16)
            if result is not None:
                result.generated_password = password
            _print_credentials(self.admin_email, password)

        hashed = hash_password(password)
        existing = await self.database.get("SELECT id FROM users WHERE email = ?", [self.admin_email])
        if existing:
            await self.database.run(
                "UPDATE users SET password = ?, role = 'admin', updatedAt = CURRENT_TIMESTAMP "
                "WHERE email = ?",
                [hashed, self.admin_email],
            )
            logger.info(f"Admin user {self.admin_email} updated")
            return "updated"

        await self.database.run(
            "INSERT INTO users (email, password, role) VALUES (?, ?, 'admin')",
            [self.admin_email, hashed],
        )
        logger.info(f"Admin user {self.admin_email} created")
        return "created"

    async def insert_sample(self, table: str, values: Dict[str, Any]) -> int:
        """Insert one sample row unless a row with its title exists. Returns rows inserted."""
        existing = await self.database.get(f"SELECT id FROM {table} WHERE title = ?", [values["title"]])
        if existing:
            return 0

        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        run = await self.database.run(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [values[c] for c in columns],
        )
        return run.changes


def _print_credentials(email: str, password: str) -> None:
    print("\n" + "=" * 60)
    print("ADMIN CREDENTIALS GENERATED")
    print("=" * 60)
    print(f"Email: {email}")
    print(f"Password: {password}")
    print("=" * 60)
    print("Set ADMIN_PASSWORD to choose the password yourself.")
    print("=" * 60 + "\n")
