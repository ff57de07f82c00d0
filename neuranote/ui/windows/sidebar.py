"""
Sidebar - user badge, folder creation, favorites and the dated folder tree
"""

from PyQt6.QtWidgets import (QVBoxLayout, QHBoxLayout, QLineEdit, QPushButton, QLabel,
                             QComboBox, QListWidget, QListWidgetItem, QTreeWidget,
                             QTreeWidgetItem, QMenu, QMessageBox)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QIcon, QPixmap

from ...config.settings import Settings, FOLDER_COLORS
from ...models.records import Folder, UserProfile
from ...records.browser import RecordsBrowser
from .base_panel import BasePanel

YEAR_ROLE = Qt.ItemDataRole.UserRole + 1
MONTH_ROLE = Qt.ItemDataRole.UserRole + 2


def color_icon(color: str, size: int = 12) -> QIcon:
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(color))
    return QIcon(pixmap)


class Sidebar(BasePanel):
    """Folder navigation next to the capture and records tabs"""

    folder_opened = pyqtSignal(object)

    def __init__(self, settings: Settings, browser: RecordsBrowser):
        super().__init__(settings.ui.notice_duration_ms)
        self.settings = settings
        self.browser = browser
        self.setFixedWidth(settings.windows.sidebar_width)

        self._setup_ui()
        self.browser.index.add_listener(self.render)
        self.render()

    def _setup_ui(self):
        """Setup the user interface"""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        # User badge
        badge_row = QHBoxLayout()
        self.initials_label = QLabel()
        self.initials_label.setFixedSize(36, 36)
        self.initials_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.initials_label.setStyleSheet("""
            QLabel {
                border-radius: 18px;
                background-color: #0EA5E9;
                color: white;
                font-weight: bold;
            }
        """)
        badge_row.addWidget(self.initials_label)
        self.username_label = QLabel()
        badge_row.addWidget(self.username_label, 1)
        layout.addLayout(badge_row)
        self.set_user(UserProfile())

        all_button = QPushButton("All Folders")
        all_button.clicked.connect(lambda: self.folder_opened.emit(None))
        layout.addWidget(all_button)

        # New folder
        create_row = QHBoxLayout()
        self.folder_name_input = QLineEdit()
        self.folder_name_input.setPlaceholderText("New folder name")
        self.folder_name_input.returnPressed.connect(self._create_folder)
        create_row.addWidget(self.folder_name_input, 1)
        self.color_combo = QComboBox()
        for color in FOLDER_COLORS:
            self.color_combo.addItem(color_icon(color), "", color)
        create_row.addWidget(self.color_combo)
        create_button = QPushButton("+")
        create_button.setFixedWidth(28)
        create_button.clicked.connect(self._create_folder)
        create_row.addWidget(create_button)
        layout.addLayout(create_row)

        # Favorites
        self.favorites_label = QLabel("FAVORITES")
        layout.addWidget(self.favorites_label)
        self.favorites_list = QListWidget()
        self.favorites_list.setMaximumHeight(120)
        self.favorites_list.itemClicked.connect(
            lambda entry: self.folder_opened.emit(entry.data(Qt.ItemDataRole.UserRole).id)
        )
        layout.addWidget(self.favorites_list)

        # Dated tree
        self.tree = QTreeWidget()
        self.tree.setHeaderHidden(True)
        self.tree.itemClicked.connect(self._on_tree_clicked)
        self.tree.itemExpanded.connect(self._on_tree_toggled)
        self.tree.itemCollapsed.connect(self._on_tree_toggled)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._show_context_menu)
        layout.addWidget(self.tree, 1)

        layout.addWidget(self.notice)

    def set_user(self, profile: UserProfile):
        self.initials_label.setText(profile.initials)
        self.username_label.setText(profile.username)

    # Rendering
    def render(self):
        browser = self.browser
        active_id = browser.active_folder_id

        favorites = browser.index.favorites
        self.favorites_list.clear()
        for folder in favorites:
            entry = QListWidgetItem(color_icon(folder.color), folder.name)
            entry.setData(Qt.ItemDataRole.UserRole, folder)
            self.favorites_list.addItem(entry)
        self.favorites_label.setVisible(bool(favorites))
        self.favorites_list.setVisible(bool(favorites))

        expansion = browser.expansion
        self.tree.blockSignals(True)
        self.tree.clear()
        for year, months in sorted(browser.grouped_folders().items(), reverse=True):
            year_item = QTreeWidgetItem([str(year)])
            year_item.setData(0, YEAR_ROLE, year)
            self.tree.addTopLevelItem(year_item)
            for month, weeks in months.items():
                month_item = QTreeWidgetItem([month])
                month_item.setData(0, YEAR_ROLE, year)
                month_item.setData(0, MONTH_ROLE, month)
                year_item.addChild(month_item)
                for week, folders in sorted(weeks.items()):
                    week_item = QTreeWidgetItem([f"Week {week}"])
                    month_item.addChild(week_item)
                    for folder in folders:
                        folder_item = QTreeWidgetItem([folder.name])
                        folder_item.setIcon(0, color_icon(folder.color))
                        folder_item.setData(0, Qt.ItemDataRole.UserRole, folder)
                        week_item.addChild(folder_item)
                        if folder.id == active_id:
                            self.tree.setCurrentItem(folder_item)
                    week_item.setExpanded(True)
                month_item.setExpanded(expansion.is_month_expanded(year, month))
            year_item.setExpanded(expansion.is_year_expanded(year))
        self.tree.blockSignals(False)

    # Handlers
    def _on_tree_clicked(self, item: QTreeWidgetItem, _column: int):
        folder = item.data(0, Qt.ItemDataRole.UserRole)
        if isinstance(folder, Folder):
            self.folder_opened.emit(folder.id)

    def _on_tree_toggled(self, item: QTreeWidgetItem):
        year = item.data(0, YEAR_ROLE)
        month = item.data(0, MONTH_ROLE)
        if year is None:
            return
        if month is None:
            self.browser.expansion.toggle_year(year)
        else:
            self.browser.expansion.toggle_month(year, month)

    def _create_folder(self):
        name = self.folder_name_input.text()
        color = self.color_combo.currentData()
        self.spawn(self._submit_folder(name, color))

    async def _submit_folder(self, name: str, color: str):
        await self.browser.create_folder(name, color)
        self.folder_name_input.clear()
        self.notice.show_notice(f"Folder '{name.strip()}' created")

    def _show_context_menu(self, position):
        item = self.tree.itemAt(position)
        folder = item.data(0, Qt.ItemDataRole.UserRole) if item else None
        if not isinstance(folder, Folder):
            return
        menu = QMenu(self)
        favorite_action = menu.addAction("Unfavorite" if folder.is_favorite else "Favorite")
        delete_action = menu.addAction("Delete")
        chosen = menu.exec(self.tree.viewport().mapToGlobal(position))
        if chosen == favorite_action:
            self.spawn(self.browser.toggle_favorite(folder))
        elif chosen == delete_action:
            answer = QMessageBox.question(self, "Delete folder",
                                          f"Delete '{folder.name}' and all its notes?")
            if answer == QMessageBox.StandardButton.Yes:
                self.spawn(self.browser.delete_folder(folder.id))
