import unittest

from techtrove_api.app.core.security import hash_password, verify_password


class PasswordHashingTests(unittest.TestCase):
    def test_hash_uses_cost_factor_ten(self):
        hashed = hash_password("analytical-engine")
        self.assertTrue(hashed.startswith("$2b$10$"))
        self.assertNotIn("analytical-engine", hashed)

    def test_hashes_are_salted(self):
        self.assertNotEqual(hash_password("same"), hash_password("same"))

    def test_verify(self):
        hashed = hash_password("analytical-engine")
        self.assertTrue(verify_password("analytical-engine", hashed))
        self.assertFalse(verify_password("difference-engine", hashed))

    def test_missing_or_garbage_hash_never_matches(self):
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", ""))
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


if __name__ == "__main__":
    unittest.main()
