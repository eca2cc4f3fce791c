# reset_db.py
#
# 資料庫維護腳本：
#   python reset_db.py init          建立尚未存在的表格 (不影響既有資料)
#   python reset_db.py reset --yes   刪除所有表格後重建，清空全部比賽與名單

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.db import Base, engine, init_db
from app.logging_config import setup_logging

# 匯入 models，讓 Base.metadata 知道有哪些表格
from app import models  # noqa: F401

logger = logging.getLogger(__name__)


def reset_db() -> bool:
    """
    刪除並重新建立所有資料庫表格。
    """
    try:
        logger.info("正在刪除所有表格 (players, matches)...")
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        logger.info("所有表格已重新建立，資料庫現在是空的。")
        return True
    except SQLAlchemyError as e:
        logger.error(f"重設資料庫時發生錯誤: {e}", exc_info=True)
        return False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="壘球成績資料庫維護工具。")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="建立尚未存在的表格。")
    reset_parser = subparsers.add_parser(
        "reset",
        help="刪除所有資料並重建表格。",
        epilog="請加上 --yes 旗標來確認執行此破壞性操作。",
    )
    reset_parser.add_argument(
        "--yes", "-y", action="store_true", help="確認執行，不會出現互動式提示。"
    )
    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "init":
        init_db()
        return 0

    if not args.yes:
        logger.warning("這是一個破壞性操作，將會清空所有比賽與名單。")
        logger.warning("範例: python reset_db.py reset --yes")
        return 1
    return 0 if reset_db() else 1


if __name__ == "__main__":
    raise SystemExit(main())
