"""
Records tab - folder/note list with search, sort, type filter, bulk delete and note detail
"""

from typing import Optional

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QPushButton,
                             QLabel, QComboBox, QListWidget, QListWidgetItem, QCheckBox,
                             QStackedWidget, QTextBrowser, QMessageBox)
from PyQt6.QtCore import Qt

from ...config.settings import Settings
from ...models.records import Folder, Note, display_text, format_date
from ...records.actions import NoteActions
from ...records.browser import RecordsBrowser
from ...records.filtering import SortKey, SortOrder, TypeFilter
from .base_panel import BasePanel

SORT_OPTIONS = [
    ("Newest first", SortKey.DATE, SortOrder.DESC),
    ("Oldest first", SortKey.DATE, SortOrder.ASC),
    ("Name A-Z", SortKey.NAME, SortOrder.ASC),
    ("Name Z-A", SortKey.NAME, SortOrder.DESC),
]

TYPE_OPTIONS = [
    ("All Types", TypeFilter.ALL),
    ("Has Pricing", TypeFilter.PRICING),
    ("Has Specs", TypeFilter.SPECS),
    ("Has Actions", TypeFilter.ACTION),
]


def render_note_html(note: Note) -> str:
    """Detail view of one note as simple HTML"""
    actions = "".join(f"<li>{display_text(item)}</li>" for item in note.action_items)
    return f"""
        <h2>{display_text(note.customer_information)}</h2>
        <p style="color: gray;">{format_date(note.created_at)}</p>
        <h3>Executive Summary</h3>
        <p>{display_text(note.executive_summary)}</p>
        <h3>Product Details</h3>
        <p>{display_text(note.product_details)}</p>
        <h3>Pricing Information</h3>
        <p>{display_text(note.pricing_information)}</p>
        <h3>Action Items</h3>
        <ul>{actions or '<li>N/A</li>'}</ul>
        <h3>Additional Notes</h3>
        <p>{display_text(note.additional_notes)}</p>
    """


class RecordsTab(BasePanel):
    """List and detail views over a RecordsBrowser"""

    def __init__(self, settings: Settings, browser: RecordsBrowser, actions: NoteActions):
        super().__init__(settings.ui.notice_duration_ms)
        self.browser = browser
        self.actions = actions
        self._shown_error: Optional[str] = None

        self._setup_ui()
        self.browser.index.add_listener(self.render)
        self.browser.selection.add_listener(self._render_selection)
        self.render()

    def _setup_ui(self):
        """Setup the user interface"""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(10)

        self.stack = QStackedWidget()
        self.stack.addWidget(self._build_list_page())
        self.stack.addWidget(self._build_detail_page())
        main_layout.addWidget(self.stack, 1)
        main_layout.addWidget(self.notice)

    def _build_list_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        header = QHBoxLayout()
        self.back_button = QPushButton("← All Folders")
        self.back_button.clicked.connect(lambda: self.open_folder(None))
        header.addWidget(self.back_button)
        self.title_label = QLabel()
        self.title_label.setStyleSheet("QLabel { font-size: 16px; font-weight: bold; }")
        header.addWidget(self.title_label, 1)
        layout.addLayout(header)

        # Toolbar
        toolbar = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search...")
        self.search_input.textChanged.connect(self._on_search)
        toolbar.addWidget(self.search_input, 1)

        self.sort_combo = QComboBox()
        for label, _, _ in SORT_OPTIONS:
            self.sort_combo.addItem(label)
        self.sort_combo.currentIndexChanged.connect(self._on_sort)
        toolbar.addWidget(self.sort_combo)

        self.type_combo = QComboBox()
        for label, _ in TYPE_OPTIONS:
            self.type_combo.addItem(label)
        self.type_combo.currentIndexChanged.connect(self._on_type_filter)
        toolbar.addWidget(self.type_combo)
        layout.addLayout(toolbar)

        # Bulk actions
        bulk_row = QHBoxLayout()
        self.select_all_checkbox = QCheckBox("Select all")
        self.select_all_checkbox.clicked.connect(lambda _: self.browser.toggle_select_all())
        bulk_row.addWidget(self.select_all_checkbox)
        bulk_row.addStretch()
        self.bulk_delete_button = QPushButton()
        self.bulk_delete_button.setStyleSheet("QPushButton { color: #DC2626; }")
        self.bulk_delete_button.clicked.connect(self._confirm_bulk_delete)
        bulk_row.addWidget(self.bulk_delete_button)
        layout.addLayout(bulk_row)

        self.item_list = QListWidget()
        self.item_list.itemChanged.connect(self._on_item_checked)
        self.item_list.itemDoubleClicked.connect(self._on_item_opened)
        layout.addWidget(self.item_list, 1)

        self.empty_label = QLabel("No records found")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.empty_label)
        return page

    def _build_detail_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        header = QHBoxLayout()
        back_button = QPushButton("← Back to List")
        back_button.clicked.connect(self.close_note)
        header.addWidget(back_button)
        header.addStretch()

        for label, handler in (("PDF", self._export_pdf), ("CSV", self._export_csv),
                               ("Email (Text)", lambda: self._send_email("text")),
                               ("Email (PDF)", lambda: self._send_email("pdf"))):
            button = QPushButton(label)
            button.clicked.connect(handler)
            header.addWidget(button)

        delete_button = QPushButton("Delete")
        delete_button.setStyleSheet("QPushButton { color: #DC2626; }")
        delete_button.clicked.connect(self._confirm_delete_note)
        header.addWidget(delete_button)
        layout.addLayout(header)

        self.note_view = QTextBrowser()
        layout.addWidget(self.note_view, 1)
        return page

    # Rendering
    def render(self):
        """Rebuild the list from the browser state"""
        browser = self.browser
        folder = browser.active_folder
        in_folder = browser.active_folder_id is not None
        self.back_button.setVisible(in_folder)
        self.type_combo.setVisible(in_folder)
        self.title_label.setText(folder.name if folder else "All Folders")
        if browser.index.last_error != self._shown_error:
            self._shown_error = browser.index.last_error
            if self._shown_error:
                self.notice.show_notice(self._shown_error, error=True)
        if self.search_input.text() != browser.view.search_query:
            self.search_input.blockSignals(True)
            self.search_input.setText(browser.view.search_query)
            self.search_input.blockSignals(False)

        self.item_list.blockSignals(True)
        self.item_list.clear()
        items = browser.visible()
        for item in items:
            if isinstance(item, Folder):
                text = f"{item.name}    {format_date(item.created_at)}"
            else:
                text = f"{display_text(item.customer_information)}    {format_date(item.created_at)}"
            entry = QListWidgetItem(text)
            entry.setData(Qt.ItemDataRole.UserRole, item)
            if isinstance(item, Folder):
                entry.setFlags(entry.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                entry.setCheckState(Qt.CheckState.Checked if item.id in browser.selection
                                    else Qt.CheckState.Unchecked)
            self.item_list.addItem(entry)
        self.item_list.blockSignals(False)

        self.empty_label.setVisible(not items)
        self._render_selection()
        self._render_note()

    def _render_selection(self):
        browser = self.browser
        selectable = browser.active_folder_id is None
        count = len(browser.selection)
        self.select_all_checkbox.setVisible(selectable)
        self.select_all_checkbox.setChecked(browser.selection.is_all_selected(browser.visible_ids()))
        self.bulk_delete_button.setVisible(selectable and count > 0)
        self.bulk_delete_button.setText(f"Delete Selected ({count})")

        self.item_list.blockSignals(True)
        for row in range(self.item_list.count()):
            entry = self.item_list.item(row)
            item = entry.data(Qt.ItemDataRole.UserRole)
            if isinstance(item, Folder):
                entry.setCheckState(Qt.CheckState.Checked if item.id in browser.selection
                                    else Qt.CheckState.Unchecked)
        self.item_list.blockSignals(False)

    def _render_note(self):
        note = self.browser.selected_note
        if note is None:
            self.stack.setCurrentIndex(0)
            return
        self.note_view.setHtml(render_note_html(note))
        self.stack.setCurrentIndex(1)

    # List handlers
    def _on_search(self, text: str):
        self.browser.set_search(text)
        self.render()

    def _on_sort(self, position: int):
        _, key, order = SORT_OPTIONS[position]
        self.browser.set_sort(key, order)
        self.render()

    def _on_type_filter(self, position: int):
        self.browser.set_type_filter(TYPE_OPTIONS[position][1])
        self.render()

    def _on_item_checked(self, entry: QListWidgetItem):
        item = entry.data(Qt.ItemDataRole.UserRole)
        if isinstance(item, Folder):
            self.browser.selection.toggle(item.id)

    def _on_item_opened(self, entry: QListWidgetItem):
        item = entry.data(Qt.ItemDataRole.UserRole)
        if isinstance(item, Folder):
            self.open_folder(item.id)
        else:
            self.browser.open_note(item)
            self._render_note()

    def open_folder(self, folder_id: Optional[int]):
        self.spawn(self._open_folder(folder_id))

    async def _open_folder(self, folder_id: Optional[int]):
        await self.browser.open_folder(folder_id)
        self.render()

    def close_note(self):
        self.browser.open_note(None)
        self._render_note()

    def _confirm_bulk_delete(self):
        count = len(self.browser.selection)
        if not count:
            return
        answer = QMessageBox.question(self, "Delete projects",
                                      f"Delete {count} projects and all their notes?")
        if answer == QMessageBox.StandardButton.Yes:
            self.spawn(self._bulk_delete())

    async def _bulk_delete(self):
        result = await self.browser.bulk_delete()
        self.notice.show_notice(result.message, error=not result.ok)
        self.render()

    # Note actions
    def _confirm_delete_note(self):
        note = self.browser.selected_note
        if note is None:
            return
        answer = QMessageBox.question(self, "Delete note", "Delete this note?")
        if answer == QMessageBox.StandardButton.Yes:
            self.spawn(self._delete_note(note.id))

    async def _delete_note(self, note_id: int):
        await self.browser.delete_note(note_id)
        self.notice.show_notice("Note deleted")
        self.render()

    def _export_pdf(self):
        note = self.browser.selected_note
        if note:
            self.spawn(self._export(self.actions.export_pdf(note)))

    def _export_csv(self):
        note = self.browser.selected_note
        if note:
            self.spawn(self._export(self.actions.export_csv(note)))

    async def _export(self, pending):
        target = await pending
        self.notice.show_notice(f"Saved {target.name}")

    def _send_email(self, mode: str):
        note = self.browser.selected_note
        if note:
            self.spawn(self._email(note, mode))

    async def _email(self, note: Note, mode: str):
        await self.actions.send_email(note, mode)
        self.notice.show_notice("Opening Outlook...")
