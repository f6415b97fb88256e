# scripts/reset_db.py
# 全テーブルを削除して作り直す（データは消えます）
import logging

from parkmap.db import reset_db

logging.basicConfig(level=logging.INFO)

if __name__ == "__main__":
    reset_db()
    print("database recreated with a fresh schema")
