"""
User and Address Repositories
"""
from typing import Optional
from app.domain.order import Address, AddressInput
from app.domain.user import User


class UserRepository:
    def __init__(self, cursor):
        self.cursor = cursor

    @staticmethod
    def _map_row_to_user(row: dict) -> User:
        return User(
            id=row['id'],
            email=row['email'],
            name=row.get('name'),
            role=row['role'],
            email_verified=row.get('email_verified', False),
            created_at=row.get('created_at')
        )

    def find_by_email(self, email: str) -> Optional[User]:
        self.cursor.execute("""
            SELECT id, email, name, role, email_verified, created_at
            FROM users
            WHERE email = %s
        """, (email,))
        row = self.cursor.fetchone()
        return self._map_row_to_user(row) if row else None

    def create_if_absent(self, email: str, password_hash: str, role: str = "CUSTOMER") -> Optional[User]:
        """
        Insert a new account unless one already exists for the email.

        Returns:
            The new User, or None when a concurrent request created it first
        """
        self.cursor.execute("""
            INSERT INTO users (email, password_hash, role, email_verified)
            VALUES (%s, %s, %s, false)
            ON CONFLICT (email) DO NOTHING
            RETURNING id, email, name, role, email_verified, created_at
        """, (email, password_hash, role))
        row = self.cursor.fetchone()
        return self._map_row_to_user(row) if row else None


class AddressRepository:
    def __init__(self, cursor):
        self.cursor = cursor

    def create(self, user_id: int, address: AddressInput) -> Address:
        self.cursor.execute("""
            INSERT INTO addresses (user_id, street, city, state, zip_code, country)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, user_id, street, city, state, zip_code, country
        """, (
            user_id,
            address.street,
            address.city,
            address.state,
            address.zip_code,
            address.country
        ))
        return Address(**self.cursor.fetchone())
