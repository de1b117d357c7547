"""主题与用户偏好：浅色/深色 QSS，以及主题、余额网络的本地持久化。

只保存非敏感偏好，助记词与钱包永不落盘。
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Literal

from loguru import logger
from PyQt5.QtWidgets import QApplication

from config import DEFAULT_NETWORK, DEFAULT_THEME, USER_SETTINGS_FILE, Network

ThemeName = Literal["light", "dark"]
THEMES = ("light", "dark")

# 基础字体与控件圆角
BASE_QSS = """
* {
    font-family: "Microsoft YaHei", "PingFang SC", Arial;
    font-size: 15px;
}
#TitleLabel {
    font-size: 24px;
    font-weight: 700;
    padding: 12px;
}
#WarningLabel, #SeedLabel {
    border-radius: 10px;
    padding: 12px;
    font-size: 14px;
}
#SeedLabel {
    font-family: "Consolas", "Menlo", monospace;
}
QGroupBox {
    border-radius: 12px;
    margin-top: 14px;
    padding: 14px;
}
QGroupBox:title {
    subcontrol-origin: margin;
    left: 14px;
    padding: 0 6px;
    font-weight: 600;
}
QPushButton {
    border: none;
    padding: 10px 14px;
    border-radius: 8px;
    font-weight: 600;
}
QLineEdit, QComboBox {
    border-radius: 8px;
    padding: 8px 10px;
}
QHeaderView::section {
    padding: 8px 10px;
    font-weight: 700;
    font-size: 14px;
}
QTableWidget {
    border-radius: 10px;
}
QStatusBar {
    padding-left: 8px;
}
"""

LIGHT_QSS = """
QWidget { background: #f7f8fa; color: #1f2d3d; }
#WarningLabel { background: #fff7e6; border: 1px solid #ffd591; color: #ad6800; }
#SeedLabel { background: #ffffff; border: 1px dashed #cbd5e1; }
QGroupBox { border: 1px solid #d9d9d9; background: #ffffff; }
QGroupBox:title { color: #555; }
QPushButton { background-color: #4b7bec; color: white; }
QPushButton:hover { background-color: #3a63c7; }
QPushButton:disabled { background-color: #a0aec0; }
#DangerButton { background-color: #e5484d; }
#DangerButton:hover { background-color: #c9383c; }
QLineEdit, QComboBox { border: 1px solid #d9d9d9; background: #ffffff; }
QTableWidget { background: #ffffff; border: 1px solid #e5e7eb; gridline-color: #e5e7eb; }
QHeaderView::section { background: #f0f2f5; border: 1px solid #e5e7eb; }
QStatusBar { background: #eef2f7; color: #1f2d3d; }
"""

DARK_QSS = """
QWidget { background: #1b1f2a; color: #e8ebf0; }
#WarningLabel { background: #2a3242; border: 1px solid #3f4a60; color: #e3ad63; }
#SeedLabel { background: #161b26; border: 1px dashed #3f4a60; }
QGroupBox { border: 1px solid #2f3849; background: #202532; }
QGroupBox:title { color: #d7deea; }
QPushButton { background-color: #3a7bd5; color: #e8ebf0; }
QPushButton:hover { background-color: #2f68b3; }
QPushButton:disabled { background-color: #3b455a; color: #8a94a6; }
#DangerButton { background-color: #b4353a; }
#DangerButton:hover { background-color: #932a2e; }
QLineEdit, QComboBox { border: 1px solid #3b455a; background: #1f2533; color: #e8ebf0; }
QTableWidget { background: #161b26; border: 1px solid #2f3849; gridline-color: #2f3849; }
QHeaderView::section { background: #202836; border: 1px solid #2f3849; color: #d7deea; }
QTableWidget::item:selected { background: #2f68b3; color: #ffffff; }
QStatusBar { background: #141821; color: #d7deea; }
"""


@dataclass
class UserSettings:
    """用户偏好：界面主题与余额查询网络。"""

    theme: ThemeName = DEFAULT_THEME  # type: ignore[assignment]
    network: Network = DEFAULT_NETWORK

    def to_json(self) -> str:
        data = asdict(self)
        data["network"] = self.network.value
        return json.dumps(data, ensure_ascii=False, indent=2)


def load_settings(settings_path: Path = USER_SETTINGS_FILE) -> UserSettings:
    """从本地配置读取偏好；文件不存在或字段非法时使用默认值。"""
    settings = UserSettings()
    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return settings
    except (OSError, ValueError) as exc:
        logger.warning("用户设置文件损坏，使用默认设置: {}", exc)
        return settings

    if not isinstance(data, dict):
        logger.warning("用户设置格式不正确，使用默认设置")
        return settings
    if data.get("theme") in THEMES:
        settings.theme = data["theme"]
    try:
        settings.network = Network(data.get("network", DEFAULT_NETWORK.value))
    except ValueError:
        logger.warning("未知网络 {!r}，使用默认网络", data.get("network"))
    return settings


def save_settings(settings: UserSettings, settings_path: Path = USER_SETTINGS_FILE) -> None:
    """将偏好写入本地配置，便于下次启动还原。"""
    settings_path.write_text(settings.to_json(), encoding="utf-8")


def build_stylesheet(theme: ThemeName) -> str:
    """组合基础 QSS 与主题色系。"""
    if theme == "dark":
        return BASE_QSS + DARK_QSS
    return BASE_QSS + LIGHT_QSS


def apply_theme(app: QApplication, theme: ThemeName) -> None:
    """将主题样式表应用到 QApplication。"""
    app.setStyleSheet(build_stylesheet(theme))
