import json
import os
from datetime import datetime, timezone


def utc_date():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


class JSONLogger:
    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = utc_date()
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def log(self, entry: dict):
        """Log a single entry to the main log."""
        with open(self.current_log, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

    def log_epoch(self, entry: dict):
        """Log the end of an epoch, stamped with the UTC time, in the file for that day."""
        if utc_date() != self.today:
            self.rotate()
        record = {"timestamp": datetime.now(timezone.utc).isoformat()}
        record.update(entry)
        self.log(record)

    def rotate(self):
        """Force start a new main log file (picks up a new UTC date)."""
        self.today = utc_date()
        self.current_log = self._get_log_filename()
