import unittest
from unittest import mock

from sqlalchemy.exc import OperationalError

from database import get_bank, get_banks, list_transfers_for_bank
from errors import NotFoundError, UpstreamError
from support import add_bank, add_transfer, make_session_factory, utc


class BankLinkQueryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        add_bank(self.db, "bank-a", user_id="user-1", created_at=utc(2025, 1, 1))
        add_bank(self.db, "bank-b", user_id="user-1", created_at=utc(2025, 2, 1))
        add_bank(self.db, "bank-c", user_id="user-2")

    def tearDown(self) -> None:
        self.db.close()

    def test_get_banks_filters_by_user(self) -> None:
        banks = get_banks(self.db, "user-1")

        self.assertEqual([bank.id for bank in banks], ["bank-a", "bank-b"])

    def test_get_banks_for_unknown_user_is_empty(self) -> None:
        self.assertEqual(get_banks(self.db, "nobody"), [])

    def test_get_bank(self) -> None:
        self.assertEqual(get_bank(self.db, "bank-c").user_id, "user-2")

    def test_get_bank_missing_raises(self) -> None:
        with self.assertRaises(NotFoundError):
            get_bank(self.db, "bank-missing")

    def test_transfers_match_sender_or_receiver(self) -> None:
        add_transfer(self.db, "t1", sender="bank-a", receiver="bank-b", created_at=utc(2025, 5, 1))
        add_transfer(self.db, "t2", sender="bank-c", receiver="bank-a", created_at=utc(2025, 5, 2))
        add_transfer(self.db, "t3", sender="bank-b", receiver="bank-c", created_at=utc(2025, 5, 3))

        transfers = list_transfers_for_bank(self.db, "bank-a")

        self.assertEqual([t.id for t in transfers], ["t1", "t2"])


class StoreFailureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = mock.Mock()
        self.db.query.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))

    def test_get_banks_wraps_errors(self) -> None:
        with self.assertRaises(UpstreamError):
            get_banks(self.db, "user-1")

    def test_get_bank_wraps_errors(self) -> None:
        with self.assertRaises(UpstreamError):
            get_bank(self.db, "bank-a")

    def test_list_transfers_wraps_errors(self) -> None:
        with self.assertRaises(UpstreamError):
            list_transfers_for_bank(self.db, "bank-a")


if __name__ == "__main__":
    unittest.main()
