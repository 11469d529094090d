from datetime import datetime, timedelta, timezone

from database import BankLink, SessionLocal, TransferRecord, init_db
from formatting import encrypt_id

DEMO_USER_ID = "demo-user"


def seed_demo_data():
    init_db()
    db = SessionLocal()

    # Check if bank links exist
    if db.query(BankLink).filter(BankLink.user_id == DEMO_USER_ID).first():
        print("Demo bank links already exist. Skipping seed.")
        db.close()
        return

    # Sandbox tokens only work with PLAID_USE_MOCK_DATA or real sandbox credentials
    checking = BankLink(user_id=DEMO_USER_ID, access_token="access-sandbox-checking", item_id="item-demo-checking")
    savings = BankLink(user_id=DEMO_USER_ID, access_token="access-sandbox-savings", item_id="item-demo-savings")
    db.add_all([checking, savings])
    db.flush()

    checking.shareable_id = encrypt_id(checking.id)
    savings.shareable_id = encrypt_id(savings.id)

    now = datetime.now(timezone.utc)
    db.add_all([
        TransferRecord(name="Rent split", amount=600.0, channel="online", category="Transfer",
                       sender_bank_id=checking.id, receiver_bank_id=savings.id,
                       created_at=now - timedelta(days=1)),
        TransferRecord(name="Savings top-up", amount=150.0, channel="online", category="Transfer",
                       sender_bank_id=savings.id, receiver_bank_id=checking.id,
                       created_at=now - timedelta(days=5)),
    ])
    db.commit()
    print(f"Seeded 2 bank links and 2 transfers for {DEMO_USER_ID}.")
    db.close()

if __name__ == "__main__":
    seed_demo_data()
