# diagnostics.py
import os
from repositories.journal_repository import JournalRepository
from utils.log_config import logger_manager

logger = logger_manager.setup_logger("diagnostics")

JOURNAL_PATH = os.getenv("LOG_FILENAME") or "./trades.jsonl"
LIMIT = int(os.getenv("DIAG_LIMIT", "5"))
TRADE_ID = os.getenv("DIAG_TRADE_ID")


def ok(b, msg): print(("✅" if b else "❌"), msg)


def main() -> None:
    print("== DIAGNÓSTICO SOLANA SNIPER ==")
    ok(os.path.exists(JOURNAL_PATH), f"Diario: {JOURNAL_PATH}")

    journal = JournalRepository(JOURNAL_PATH)
    try:
        last_id = journal.load(); ok(True, f"JournalRepository OK (último id #{last_id})")
    except Exception as e:
        ok(False, f"JournalRepository fallo: {e}")
        logger.error(f"No se pudo cargar el diario {JOURNAL_PATH}: {e}")
        return

    s = journal.summary()
    print(f"Trades: {s['trades']} | cerrados: {s['closed']} | con beneficio: {s['wins']}")
    print(f"Beneficio total: {s['profit_total']} | último balance: {s['last_balance']}")
    print(f"Por motivo de cierre: {s['by_reason']}")

    rows = journal.list_recent(limit=LIMIT)
    print(f"Últimos trades (top {LIMIT}):")
    for r in rows:
        print(f"  #{r.get('id')} {r.get('mint')} {r.get('close_reason')} profit={r.get('profit')} balance={r.get('balance')}")

    if TRADE_ID:
        row = journal.get_by_id(int(TRADE_ID))
        ok(row is not None, f"Trade #{TRADE_ID}")
        if row is not None:
            for k, v in row.items():
                print(f"  {k}: {v}")

    print("== FIN ==")


if __name__ == "__main__":
    main()
