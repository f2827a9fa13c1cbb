# tests/test_journal_repository.py
from decimal import Decimal

from enums.close_reason import CloseReason
from models.trade import Trade
from repositories.journal_repository import JournalRepository


def _closed_trade(mint, amount_out, reason=CloseReason.CLOSED):
    t = Trade(mint=mint)
    t.start()
    t.open(Decimal("1"), Decimal("0"))
    t.close(Decimal(amount_out), Decimal("0"), reason)
    return t


def test_load_creates_empty_journal(tmp_path):
    path = tmp_path / "journal" / "trades.jsonl"
    repo = JournalRepository(str(path))
    assert repo.load() == 0
    assert path.exists()


def test_sequence_is_recovered_after_restart(tmp_path):
    path = tmp_path / "trades.jsonl"
    repo = JournalRepository(str(path))
    repo.load()
    for i in range(3):
        assert repo.append(_closed_trade(f"Mint{i}", "1.5"), Decimal("10")) == i + 1

    reopened = JournalRepository(str(path))
    assert reopened.load() == 3
    assert reopened.append(_closed_trade("Mint3", "0.5"), Decimal("9")) == 4
    assert len(path.read_text(encoding="utf-8").splitlines()) == 4


def test_append_stamps_id_and_balance(tmp_path):
    repo = JournalRepository(str(tmp_path / "trades.jsonl"))
    repo.load()
    t = _closed_trade("MintA", "2")
    repo.append(t, Decimal("12.5"))
    assert t.id == 1
    assert t.balance == Decimal("12.5")

    row = repo.get_by_id(1)
    assert row["mint"] == "MintA"
    assert Decimal(str(row["balance"])) == Decimal("12.5")
    assert repo.get_by_id(2) is None


def test_list_recent_and_summary(tmp_path):
    repo = JournalRepository(str(tmp_path / "trades.jsonl"))
    repo.load()
    repo.append(_closed_trade("MintA", "2"), Decimal("11"))
    repo.append(_closed_trade("MintB", "0", CloseReason.SELL_FAILED), Decimal("10"))
    repo.append(_closed_trade("MintC", "1.5"), Decimal("10.5"))

    recent = repo.list_recent(limit=2)
    assert [r["mint"] for r in recent] == ["MintC", "MintB"]

    s = repo.summary()
    assert s["trades"] == 3
    assert s["closed"] == 3
    assert s["wins"] == 2
    assert s["profit_total"] == Decimal("0.5")
    assert s["by_reason"] == {"closed": 2, "sell_failed": 1}
    assert s["last_balance"] == Decimal("10.5")


def test_truncated_last_line_is_skipped_on_load(tmp_path):
    path = tmp_path / "trades.jsonl"
    repo = JournalRepository(str(path))
    repo.load()
    repo.append(_closed_trade("MintA", "2"), Decimal("11"))
    repo.append(_closed_trade("MintB", "1"), Decimal("11"))
    with path.open("a", encoding="utf-8") as f:
        f.write('{"id": 3, "mi')

    reopened = JournalRepository(str(path))
    assert reopened.load() == 2
    assert [r["mint"] for r in reopened.list_recent()] == ["MintB", "MintA"]

    assert reopened.append(_closed_trade("MintC", "1"), Decimal("11")) == 3
    again = JournalRepository(str(path))
    assert again.load() == 3
    assert again.get_by_id(3)["mint"] == "MintC"
