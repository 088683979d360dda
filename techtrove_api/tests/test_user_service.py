import asyncio
import unittest
from unittest import mock

from techtrove_api.app.core.db import InMemoryDocumentStore
from techtrove_api.app.core.errors import AuthError, ConflictError, ValidationError
from techtrove_api.app.schemas.user import GoogleSignupRequest, LoginRequest, SignupRequest
from techtrove_api.app.services.user_service import UserService, normalize_email


def signup_request(email="ada@example.com"):
    return SignupRequest(name="Ada", email=email, username="ada", password="analytical-engine")


class UserServiceTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryDocumentStore()
        await self.store.connect()
        self.service = UserService(self.store.users)

    def test_normalize_email(self):
        self.assertEqual(normalize_email("  Ada@Example.COM "), "ada@example.com")

    async def test_concurrent_signups_with_same_email_create_one_user(self):
        results = await asyncio.gather(
            self.service.signup(signup_request()),
            self.service.signup(signup_request()),
            return_exceptions=True,
        )
        successes = [result for result in results if isinstance(result, str)]
        conflicts = [result for result in results if isinstance(result, ConflictError)]
        self.assertEqual(len(successes), 1)
        self.assertEqual(len(conflicts), 1)
        self.assertEqual(len(self.store.users.documents), 1)

    async def test_unique_index_catches_a_missed_lookup(self):
        await self.service.signup(signup_request())
        with mock.patch.object(self.store.users, "find_one", mock.AsyncMock(return_value=None)):
            with self.assertRaises(ConflictError):
                await self.service.signup(signup_request())
        self.assertEqual(len(self.store.users.documents), 1)

    async def test_concurrent_signups_with_distinct_emails_all_succeed(self):
        emails = [f"user{n}@example.com" for n in range(4)]
        ids = await asyncio.gather(*(self.service.signup(signup_request(email)) for email in emails))
        self.assertEqual(len(set(ids)), 4)

    async def test_signup_requires_every_field(self):
        with self.assertRaises(ValidationError):
            await self.service.signup(SignupRequest(name="Ada", email="ada@example.com", username="ada"))

    async def test_login_never_returns_the_hash(self):
        await self.service.signup(signup_request())
        user = await self.service.login(LoginRequest(email="ada@example.com", password="analytical-engine"))
        self.assertEqual(set(user.model_dump()), {"id", "name", "email", "username"})

    async def test_login_failures_share_one_message(self):
        await self.service.signup(signup_request())
        with self.assertRaises(AuthError) as wrong_password:
            await self.service.login(LoginRequest(email="ada@example.com", password="nope"))
        with self.assertRaises(AuthError) as unknown_email:
            await self.service.login(LoginRequest(email="bob@example.com", password="analytical-engine"))
        self.assertEqual(wrong_password.exception.message, unknown_email.exception.message)

    async def test_concurrent_google_signups_share_one_account(self):
        request = GoogleSignupRequest(email="grace@example.com", name="Grace", googleId="g-1")
        first, second = await asyncio.gather(
            self.service.google_signup(request), self.service.google_signup(request)
        )
        self.assertEqual(first.id, second.id)
        self.assertEqual(len(self.store.users.documents), 1)


if __name__ == "__main__":
    unittest.main()
