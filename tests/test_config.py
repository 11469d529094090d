import os
import unittest
from unittest import mock

from config import load_settings


class SettingsTests(unittest.TestCase):
    def test_defaults_without_credentials_use_mock_data(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings()

        self.assertFalse(settings.has_plaid_credentials)
        self.assertTrue(settings.use_mock_data)
        self.assertEqual(settings.plaid_env, "sandbox")
        self.assertEqual(settings.plaid_country_codes, ("US",))
        self.assertEqual(settings.database_url, "sqlite:///finance_dashboard.db")

    def test_credentials_switch_to_live_calls(self) -> None:
        env = {"PLAID_CLIENT_ID": "client", "PLAID_SECRET": "secret", "PLAID_ENV": "Production"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_settings()

        self.assertTrue(settings.has_plaid_credentials)
        self.assertFalse(settings.use_mock_data)
        self.assertEqual(settings.plaid_env, "production")

    def test_mock_flag_overrides_credentials(self) -> None:
        env = {"PLAID_CLIENT_ID": "client", "PLAID_SECRET": "secret", "PLAID_USE_MOCK_DATA": "true"}
        with mock.patch.dict(os.environ, env, clear=True):
            self.assertTrue(load_settings().use_mock_data)

    def test_country_codes_are_parsed(self) -> None:
        with mock.patch.dict(os.environ, {"PLAID_COUNTRY_CODES": "us, ca,,gb"}, clear=True):
            self.assertEqual(load_settings().plaid_country_codes, ("US", "CA", "GB"))

    def test_unknown_environment_raises(self) -> None:
        with mock.patch.dict(os.environ, {"PLAID_ENV": "staging"}, clear=True):
            with self.assertRaises(ValueError):
                load_settings()


if __name__ == "__main__":
    unittest.main()
