from pathlib import Path
from datetime import datetime
from typing import Optional

from shg.core.config import settings, LOGS_DIR


def write_audit_log(actor: Optional[str], action: str, details: str = ""):
    """Append one line per operator action to the month's audit file."""
    logs_dir = Path(settings.AUDIT_LOG_DIR) if settings.AUDIT_LOG_DIR else LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    month_str = datetime.now().strftime("%Y_%m")
    log_file = logs_dir / f"audit_{month_str}.log"
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with open(log_file, "a", encoding="utf-8") as f:
        f.write(f"{ts} | {actor or 'system'} | {action} | {details}\n")
