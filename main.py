"""应用入口，负责配置日志、启动 QApplication 并加载主题。"""

import sys

from loguru import logger
from PyQt5.QtWidgets import QApplication

from config import LOG_DIR, LOG_FILE_PATTERN, LOG_RETENTION, LOG_ROTATION
from main_window import MainWindow
from theme_manager import apply_theme, load_settings


def setup_logging() -> None:
    """配置 loguru：终端输出 INFO，文件输出 DEBUG。"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="INFO",
    )
    logger.add(
        str(LOG_DIR / LOG_FILE_PATTERN),
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        level="DEBUG",
    )


def run_app() -> None:
    """启动 Zent 主窗口。"""
    setup_logging()
    app = QApplication(sys.argv)
    settings = load_settings()
    apply_theme(app, settings.theme)

    window = MainWindow(app=app, settings=settings)
    window.show()
    logger.info("Zent 已启动（余额网络 {}）", settings.network.value)
    sys.exit(app.exec_())


if __name__ == "__main__":
    run_app()
