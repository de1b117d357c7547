"""主窗口与界面逻辑：金库创建、钱包增删、余额刷新、复制与主题切换。

界面只通过 VaultStore 与 balance_oracle 的公开接口工作，不包含任何密钥逻辑。
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger
from PyQt5.QtCore import Qt, QThread, pyqtSignal
from PyQt5.QtGui import QIcon
from PyQt5.QtWidgets import (
    QApplication,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPushButton,
    QStatusBar,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from balance_oracle import BalanceKey, RpcBalanceOracle, current_balances, fetch_balances
from config import UNKNOWN_BALANCE, ChainType, Network
from exceptions import VaultError
from models import WalletRecord
from theme_manager import ThemeName, UserSettings, apply_theme, save_settings
from vault_store import VaultStore

MASK = "**************"

COLUMNS = ["操作", "钱包", "序号", "ETH 地址", "ETH 私钥", "ETH 余额", "SOL 地址", "SOL 私钥", "SOL 余额"]
COL_ETH_KEY = 4
COL_ETH_BALANCE = 5
COL_SOL_KEY = 7
COL_SOL_BALANCE = 8


def copy_actions(wallet: WalletRecord, show_private_keys: bool) -> List[Tuple[str, str, str]]:
    """钱包行的复制按钮：(按钮文字, 复制内容, 状态提示)；私钥按钮仅在显示私钥时出现。"""
    actions = [
        ("复制 ETH 地址", wallet.ethereum.address, "ETH 地址已复制到剪贴板"),
        ("复制 SOL 地址", wallet.solana.address, "SOL 地址已复制到剪贴板"),
    ]
    if show_private_keys:
        actions += [
            ("复制 ETH 私钥", wallet.ethereum.private_key, "ETH 私钥已复制，请注意保密"),
            ("复制 SOL 私钥", wallet.solana.private_key, "SOL 私钥已复制，请注意保密"),
        ]
    return actions


class TaskWorker(QThread):
    """后台执行派生等耗时操作，避免阻塞 UI。"""

    finished_ok = pyqtSignal(object)
    failed = pyqtSignal(str)

    def __init__(self, fn: Callable[[], Any], parent=None):
        super().__init__(parent)
        self.fn = fn

    def run(self) -> None:
        try:
            self.finished_ok.emit(self.fn())
        except VaultError as exc:
            self.failed.emit(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("后台任务异常")
            self.failed.emit(str(exc))


class BalanceWorker(QThread):
    """后台并发查询余额；单个查询失败只显示为未知。"""

    finished_ok = pyqtSignal(object, dict)

    def __init__(self, wallets, network: Network, parent=None):
        super().__init__(parent)
        self.wallets = tuple(wallets)
        self.network = network

    def run(self) -> None:
        self.finished_ok.emit(self.network, asyncio.run(self._fetch()))

    async def _fetch(self) -> Dict[BalanceKey, str]:
        async with RpcBalanceOracle() as oracle:
            return await fetch_balances(oracle, self.wallets, self.network)


class MainWindow(QMainWindow):
    """主窗口，负责用户交互与状态展示。"""

    def __init__(self, app: QApplication, settings: UserSettings, store: Optional[VaultStore] = None) -> None:
        super().__init__()
        self.app = app
        self.settings = settings
        self.store = store or VaultStore()
        self.balances: Dict[BalanceKey, str] = {}
        self.show_private_keys = False
        self.show_seed = False
        self.worker: Optional[TaskWorker] = None
        self.balance_worker: Optional[BalanceWorker] = None

        self.setWindowTitle("Zent - 多链 HD 钱包金库")
        self.setMinimumSize(1200, 820)
        self.setWindowIcon(QIcon())

        self._setup_ui()
        self._init_menu()
        self._sync_vault_view()
        self._set_status("本地离线派生，准备就绪")

    # ------------------------- UI 构建 ------------------------- #
    def _setup_ui(self) -> None:
        """搭建界面布局。"""
        central = QWidget(self)
        self.setCentralWidget(central)
        main_layout = QVBoxLayout()
        central.setLayout(main_layout)

        title = QLabel("Zent - 以太坊 / Solana 多链钱包金库")
        title.setObjectName("TitleLabel")
        title.setAlignment(Qt.AlignCenter)
        main_layout.addWidget(title)

        warning = QLabel("安全提醒：助记词与私钥仅保存在本次会话内存中，关闭程序即丢失，请自行妥善备份，不要截图或分享。")
        warning.setWordWrap(True)
        warning.setObjectName("WarningLabel")
        main_layout.addWidget(warning)

        # 初始化金库
        self.create_box = QGroupBox("初始化金库")
        create_layout = QFormLayout()
        self.create_box.setLayout(create_layout)
        self.seed_input = QLineEdit()
        self.seed_input.setPlaceholderText("输入 12 或 24 个单词的助记词；留空则生成新助记词")
        self.seed_input.setEchoMode(QLineEdit.Password)
        create_layout.addRow("助记词", self.seed_input)
        self.create_btn = QPushButton("创建金库")
        self.create_btn.clicked.connect(self._create_vault)
        create_layout.addRow("", self.create_btn)
        main_layout.addWidget(self.create_box)

        # 助记词展示
        self.seed_box = QGroupBox("助记词")
        seed_layout = QVBoxLayout()
        self.seed_box.setLayout(seed_layout)
        self.seed_label = QLabel()
        self.seed_label.setObjectName("SeedLabel")
        self.seed_label.setWordWrap(True)
        self.seed_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        seed_layout.addWidget(self.seed_label)
        seed_btns = QHBoxLayout()
        self.toggle_seed_btn = QPushButton("显示助记词")
        self.toggle_seed_btn.clicked.connect(self._toggle_seed)
        seed_btns.addWidget(self.toggle_seed_btn)
        self.copy_seed_btn = QPushButton("复制助记词")
        self.copy_seed_btn.clicked.connect(self._copy_seed)
        seed_btns.addWidget(self.copy_seed_btn)
        seed_btns.addStretch()
        seed_layout.addLayout(seed_btns)
        main_layout.addWidget(self.seed_box)

        # 钱包操作
        btn_layout = QHBoxLayout()
        btn_layout.setAlignment(Qt.AlignLeft)
        main_layout.addLayout(btn_layout)

        self.add_btn = QPushButton("新增钱包")
        self.add_btn.clicked.connect(self._add_wallet)
        btn_layout.addWidget(self.add_btn)

        self.refresh_btn = QPushButton("刷新余额")
        self.refresh_btn.clicked.connect(self._refresh_balances)
        btn_layout.addWidget(self.refresh_btn)

        self.toggle_key_btn = QPushButton("显示私钥")
        self.toggle_key_btn.clicked.connect(self._toggle_private_keys)
        btn_layout.addWidget(self.toggle_key_btn)

        self.clear_btn = QPushButton("清空金库")
        self.clear_btn.setObjectName("DangerButton")
        self.clear_btn.clicked.connect(self._clear_vault)
        btn_layout.addWidget(self.clear_btn)

        btn_layout.addWidget(QLabel("余额网络"))
        self.network_combo = QComboBox()
        for net in Network:
            self.network_combo.addItem(net.value, net)
        self.network_combo.setCurrentIndex(list(Network).index(self.settings.network))
        self.network_combo.currentIndexChanged.connect(self._on_network_change)
        btn_layout.addWidget(self.network_combo)

        self.theme_toggle_btn = QPushButton()
        self.theme_toggle_btn.clicked.connect(self._toggle_theme_button)
        btn_layout.addWidget(self.theme_toggle_btn)
        self._update_theme_toggle_text()
        btn_layout.addStretch()

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.horizontalHeader().setDefaultSectionSize(210)
        self.table.verticalHeader().setVisible(False)
        main_layout.addWidget(self.table)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

    def _init_menu(self) -> None:
        """初始化菜单栏（主题切换）。"""
        menu_bar = self.menuBar()
        view_menu: QMenu = menu_bar.addMenu("视图")
        theme_menu = view_menu.addMenu("主题")

        self.light_action = theme_menu.addAction("浅色模式")
        self.dark_action = theme_menu.addAction("深色模式")
        self.light_action.setCheckable(True)
        self.dark_action.setCheckable(True)
        self.light_action.triggered.connect(lambda: self._switch_theme("light"))
        self.dark_action.triggered.connect(lambda: self._switch_theme("dark"))
        self._refresh_theme_actions()

    # ------------------------- 金库操作 ------------------------- #
    def _run_task(self, fn: Callable[[], Any], on_done: Callable[[Any], None], status: str) -> None:
        """在后台线程执行金库操作，期间禁用相关按钮。"""
        if self.worker is not None:
            return
        self._set_busy(True)
        self._set_status(status)
        self.worker = TaskWorker(fn)
        self.worker.finished_ok.connect(on_done)
        self.worker.failed.connect(self._on_task_failed)
        self.worker.finished.connect(self._on_task_finished)
        self.worker.start()

    def _create_vault(self) -> None:
        seed_input = self.seed_input.text()
        self._run_task(lambda: self.store.create_vault(seed_input), self._on_vault_created, "正在派生钱包…")

    def _on_vault_created(self, _vault: Any) -> None:
        self.seed_input.clear()
        self.show_seed = False
        self.balances.clear()
        self._sync_vault_view()
        self._set_status("金库已创建，已派生 Wallet 1")

    def _add_wallet(self) -> None:
        self._run_task(self.store.add_wallet, self._on_wallet_added, "正在派生新钱包…")

    def _on_wallet_added(self, wallet: WalletRecord) -> None:
        self._refresh_table()
        self._set_status(f"已新增 {wallet.label}（序号 {wallet.account_index}）")

    def _delete_wallet(self, wallet_id: str) -> None:
        try:
            self.store.delete_wallet(wallet_id)
        except VaultError as exc:
            QMessageBox.warning(self, "无法删除", str(exc))
            return
        for chain in ChainType:
            self.balances.pop((wallet_id, chain), None)
        self._refresh_table()
        self._set_status("已删除钱包")

    def _clear_vault(self) -> None:
        """确认后清空助记词与全部钱包。"""
        reply = QMessageBox.question(
            self,
            "清空金库",
            "确定要清空整个金库吗？助记词与所有钱包将被删除且无法恢复。",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if reply != QMessageBox.Yes:
            return
        self.store.clear_vault()
        self.balances.clear()
        self.show_seed = False
        self.show_private_keys = False
        self.toggle_key_btn.setText("显示私钥")
        self._sync_vault_view()
        self._set_status("金库已清空")

    def _on_task_failed(self, message: str) -> None:
        QMessageBox.warning(self, "操作失败", message)
        self._set_status("操作失败")

    def _on_task_finished(self) -> None:
        self.worker = None
        self._set_busy(False)

    # ------------------------- 余额 ------------------------- #
    def _current_network(self) -> Network:
        return self.network_combo.currentData()

    def _refresh_balances(self) -> None:
        if not self.store.is_active or self.balance_worker is not None:
            return
        self.refresh_btn.setEnabled(False)
        self._set_status(f"正在查询 {self._current_network().value} 余额…")
        self.balance_worker = BalanceWorker(self.store.wallets, self._current_network())
        self.balance_worker.finished_ok.connect(self._on_balances)
        self.balance_worker.finished.connect(self._on_balance_finished)
        self.balance_worker.start()

    def _on_balances(self, network: Network, balances: Dict[BalanceKey, str]) -> None:
        live_ids = [w.id for w in self.store.wallets]
        balances = current_balances(balances, network, self._current_network(), live_ids)
        if not balances:
            logger.info("丢弃过期的 {} 余额结果", network.value)
            return
        self.balances.update(balances)
        self._refresh_table()
        failed = sum(1 for value in balances.values() if value == UNKNOWN_BALANCE)
        if failed:
            self._set_status(f"余额已刷新，{failed} 项查询失败")
        else:
            self._set_status("余额已刷新")

    def _on_balance_finished(self) -> None:
        self.balance_worker = None
        self.refresh_btn.setEnabled(self.store.is_active)

    def _on_network_change(self, _index: int) -> None:
        """切换余额网络：旧网络的余额不再适用。"""
        self.settings.network = self._current_network()
        save_settings(self.settings)
        self.balances.clear()
        self._refresh_table()
        logger.info("余额网络切换为 {}", self.settings.network.value)

    # ------------------------- 展示 ------------------------- #
    def _sync_vault_view(self) -> None:
        """根据金库状态切换初始化区与助记词区。"""
        active = self.store.is_active
        self.create_box.setVisible(not active)
        self.seed_box.setVisible(active)
        self._set_busy(False)
        self._refresh_seed_label()
        self._refresh_table()

    def _set_busy(self, busy: bool) -> None:
        active = self.store.is_active
        self.create_btn.setEnabled(not busy and not active)
        self.add_btn.setEnabled(not busy and active)
        self.clear_btn.setEnabled(not busy and active)
        self.refresh_btn.setEnabled(not busy and active and self.balance_worker is None)

    def _refresh_seed_label(self) -> None:
        seed = self.store.seed_phrase
        if seed is None:
            self.seed_label.setText("")
        elif self.show_seed:
            self.seed_label.setText(
                "   ".join(f"{i:02d}. {word}" for i, word in enumerate(seed.words, start=1))
            )
        else:
            self.seed_label.setText("安全层已启用，点击“显示助记词”查看")
        self.toggle_seed_btn.setText("隐藏助记词" if self.show_seed else "显示助记词")

    def _refresh_table(self) -> None:
        """根据当前钱包列表刷新表格。"""
        wallets = self.store.wallets
        can_delete = len(wallets) > 1
        self.table.setRowCount(len(wallets))
        for row, w in enumerate(wallets):
            self.table.setCellWidget(row, 0, self._build_action_buttons(w, can_delete))
            items = [
                (1, w.label),
                (2, str(w.account_index)),
                (3, w.ethereum.address),
                (COL_ETH_KEY, self._mask_value(w.ethereum.private_key)),
                (COL_ETH_BALANCE, self._balance_text(w, ChainType.ETHEREUM)),
                (6, w.solana.address),
                (COL_SOL_KEY, self._mask_value(w.solana.private_key)),
                (COL_SOL_BALANCE, self._balance_text(w, ChainType.SOLANA)),
            ]
            for col, text in items:
                item = QTableWidgetItem(text)
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                self.table.setItem(row, col, item)
        self.table.resizeColumnsToContents()
        self.table.horizontalHeader().setStretchLastSection(True)

    def _build_action_buttons(self, wallet: WalletRecord, can_delete: bool) -> QWidget:
        """为指定钱包创建复制/删除按钮组。"""
        container = QWidget()
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        for text, value, message in copy_actions(wallet, self.show_private_keys):
            btn = QPushButton(text)
            btn.clicked.connect(lambda _, v=value, m=message: self._copy_text(v, m))
            layout.addWidget(btn)

        if can_delete:
            btn_delete = QPushButton("删除")
            btn_delete.setObjectName("DangerButton")
            btn_delete.clicked.connect(lambda _, wid=wallet.id: self._delete_wallet(wid))
            layout.addWidget(btn_delete)

        layout.addStretch()
        return container

    def _balance_text(self, wallet: WalletRecord, chain: ChainType) -> str:
        return self.balances.get((wallet.id, chain), UNKNOWN_BALANCE)

    def _copy_text(self, value: str, message: str) -> None:
        QApplication.clipboard().setText(value)
        self._set_status(message)

    def _copy_seed(self) -> None:
        seed = self.store.seed_phrase
        if seed is not None:
            self._copy_text(str(seed), "助记词已复制，请注意保密")

    def _mask_value(self, value: str) -> str:
        """根据开关返回显示值。"""
        if self.show_private_keys:
            return value
        return MASK

    def _toggle_seed(self) -> None:
        self.show_seed = not self.show_seed
        self._refresh_seed_label()

    def _toggle_private_keys(self) -> None:
        """切换私钥显示状态。"""
        self.show_private_keys = not self.show_private_keys
        self.toggle_key_btn.setText("隐藏私钥" if self.show_private_keys else "显示私钥")
        self._refresh_table()

    def _set_status(self, text: str) -> None:
        """更新底部状态文本。"""
        self.status_bar.showMessage(text, 3000)

    # ------------------------- 主题 ------------------------- #
    def _switch_theme(self, theme: ThemeName) -> None:
        """切换主题并持久化。"""
        if theme == self.settings.theme:
            self._refresh_theme_actions()
            return
        self.settings.theme = theme
        apply_theme(self.app, theme)
        save_settings(self.settings)
        self._refresh_theme_actions()
        self._update_theme_toggle_text()
        self._set_status("已切换为深色模式" if theme == "dark" else "已切换为浅色模式")

    def _refresh_theme_actions(self) -> None:
        """同步菜单勾选状态。"""
        self.light_action.setChecked(self.settings.theme == "light")
        self.dark_action.setChecked(self.settings.theme == "dark")

    def _update_theme_toggle_text(self) -> None:
        if self.settings.theme == "dark":
            self.theme_toggle_btn.setText("切换到浅色模式")
        else:
            self.theme_toggle_btn.setText("切换到深色模式")

    def _toggle_theme_button(self) -> None:
        target = "light" if self.settings.theme == "dark" else "dark"
        self._switch_theme(target)
