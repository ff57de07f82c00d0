"""
Capture tab - stage pages or text and run the analysis
"""

from pathlib import Path
from typing import Callable, List, Optional

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QTextEdit, QPushButton,
                             QLabel, QFrame, QComboBox, QCheckBox, QStackedWidget,
                             QButtonGroup, QFileDialog, QInputDialog, QScrollArea)
from PyQt6.QtCore import Qt, pyqtSignal, QTimer

from ...capture.session import CaptureSession, SessionStatus
from ...config.settings import Settings
from ...models.records import CaptureMode
from ...utils.camera import CameraManager
from ..components.page_thumb import PageThumb, pixmap_from_data_url
from .base_panel import BasePanel

MODES = [
    (CaptureMode.UPLOAD, "Upload"),
    (CaptureMode.WEBCAM, "Webcam"),
    (CaptureMode.TEXT, "Text"),
]


class DropZone(QFrame):
    """Accepts dropped local files"""

    files_dropped = pyqtSignal(list)

    def __init__(self):
        super().__init__()
        self.setAcceptDrops(True)
        self.setMinimumHeight(160)
        self.setStyleSheet("""
            QFrame {
                border: 2px dashed rgba(128, 128, 128, 0.6);
                border-radius: 12px;
            }
        """)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
        if paths:
            self.files_dropped.emit(paths)
        event.acceptProposedAction()


class CaptureTab(BasePanel):
    """Capture view bound to one CaptureSession"""

    view_records_requested = pyqtSignal()

    def __init__(self, settings: Settings, session: CaptureSession,
                 folder_provider: Callable[[], Optional[int]]):
        super().__init__(settings.ui.notice_duration_ms)
        self.settings = settings
        self.session = session
        self.folder_provider = folder_provider
        self.camera = CameraManager(settings.capture.camera_index, settings.capture.jpeg_quality)

        self.success_timer = QTimer(self)
        self.success_timer.setSingleShot(True)
        self.success_timer.timeout.connect(self._hide_success)

        self._setup_ui()
        self.populate_prompts()
        self.session.add_listener(self._refresh_state)
        self._refresh_state()

    def _setup_ui(self):
        """Setup the user interface"""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(16, 16, 16, 16)
        main_layout.setSpacing(12)

        # Mode switch
        mode_layout = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        for position, (mode, label) in enumerate(MODES):
            button = QPushButton(label)
            button.setCheckable(True)
            button.setChecked(mode == self.session.mode)
            self.mode_group.addButton(button, position)
            mode_layout.addWidget(button)
        mode_layout.addStretch()
        self.mode_group.idClicked.connect(self._on_mode_clicked)
        main_layout.addLayout(mode_layout)

        # Input area
        self.input_stack = QStackedWidget()
        self.input_stack.addWidget(self._build_upload_page())
        self.input_stack.addWidget(self._build_webcam_page())
        self.input_stack.addWidget(self._build_text_page())
        main_layout.addWidget(self.input_stack)

        # Staged pages
        self.pages_label = QLabel()
        main_layout.addWidget(self.pages_label)
        self.pages_container = QWidget()
        self.pages_layout = QHBoxLayout(self.pages_container)
        self.pages_layout.setContentsMargins(0, 0, 0, 0)
        self.pages_layout.setAlignment(Qt.AlignmentFlag.AlignLeft)
        pages_scroll = QScrollArea()
        pages_scroll.setWidgetResizable(True)
        pages_scroll.setFixedHeight(120)
        pages_scroll.setWidget(self.pages_container)
        self.pages_scroll = pages_scroll
        main_layout.addWidget(pages_scroll)

        # Prompt selection
        prompt_row = QHBoxLayout()
        self.prompt_combo = QComboBox()
        self.prompt_combo.currentIndexChanged.connect(self._on_prompt_selected)
        prompt_row.addWidget(self.prompt_combo, 1)
        self.merge_checkbox = QCheckBox("Merge files")
        self.merge_checkbox.toggled.connect(self._on_merge_toggled)
        prompt_row.addWidget(self.merge_checkbox)
        main_layout.addLayout(prompt_row)

        # Imported prompts (hidden until a sheet is loaded)
        self.imported_row = QWidget()
        imported_layout = QHBoxLayout(self.imported_row)
        imported_layout.setContentsMargins(0, 0, 0, 0)
        imported_layout.addWidget(QLabel("IMPORT:"))
        self.imported_combo = QComboBox()
        self.imported_combo.activated.connect(self._on_imported_selected)
        imported_layout.addWidget(self.imported_combo, 1)
        dismiss_button = QPushButton("✕")
        dismiss_button.setToolTip("Dismiss & Clear")
        dismiss_button.clicked.connect(self._dismiss_imported)
        imported_layout.addWidget(dismiss_button)
        self.imported_row.hide()
        main_layout.addWidget(self.imported_row)

        # Free-form prompt
        freeform_row = QHBoxLayout()
        self.freeform_input = QTextEdit()
        self.freeform_input.setPlaceholderText("Custom requirements (or select from Excel)...")
        self.freeform_input.setFixedHeight(64)
        self.freeform_input.textChanged.connect(self._on_freeform_changed)
        freeform_row.addWidget(self.freeform_input, 1)
        side_buttons = QVBoxLayout()
        load_sheet_button = QPushButton("Load Excel")
        load_sheet_button.clicked.connect(self._load_sheet)
        side_buttons.addWidget(load_sheet_button)
        self.save_prompt_button = QPushButton("Save Prompt")
        self.save_prompt_button.clicked.connect(self._save_prompt)
        side_buttons.addWidget(self.save_prompt_button)
        freeform_row.addLayout(side_buttons)
        main_layout.addLayout(freeform_row)

        main_layout.addStretch()
        main_layout.addWidget(self.notice)

        # Footer
        self.run_button = QPushButton("RUN ANALYSIS")
        self.run_button.setMinimumHeight(40)
        self.run_button.clicked.connect(self._run_analysis)
        self.run_button.setStyleSheet("""
            QPushButton {
                border: none;
                border-radius: 8px;
                background-color: #0EA5E9;
                color: white;
                font-size: 14px;
                font-weight: bold;
            }
            QPushButton:disabled {
                background-color: rgba(128, 128, 128, 0.3);
                color: #888;
            }
        """)
        main_layout.addWidget(self.run_button)

        self.success_row = QWidget()
        success_layout = QHBoxLayout(self.success_row)
        success_layout.setContentsMargins(0, 0, 0, 0)
        success_label = QLabel("Saved!")
        success_label.setStyleSheet("QLabel { color: #16A34A; font-weight: bold; }")
        success_layout.addWidget(success_label, 1)
        view_button = QPushButton("View Record →")
        view_button.clicked.connect(self.view_records_requested.emit)
        success_layout.addWidget(view_button)
        self.success_row.hide()
        main_layout.addWidget(self.success_row)

    def _build_upload_page(self) -> QWidget:
        self.drop_zone = DropZone()
        self.drop_zone.files_dropped.connect(self._add_files)
        layout = QVBoxLayout(self.drop_zone)
        title = QLabel("Drag & Drop files")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)
        buttons = QHBoxLayout()
        buttons.addStretch()
        select_files = QPushButton("Select Files")
        select_files.clicked.connect(self._select_files)
        buttons.addWidget(select_files)
        select_folder = QPushButton("Select Folder")
        select_folder.clicked.connect(self._select_folder)
        buttons.addWidget(select_folder)
        buttons.addStretch()
        layout.addLayout(buttons)
        return self.drop_zone

    def _build_webcam_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.camera_preview = QLabel("Camera preview")
        self.camera_preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.camera_preview.setMinimumHeight(160)
        layout.addWidget(self.camera_preview)
        snap_button = QPushButton("SNAP")
        snap_button.clicked.connect(self._snap)
        layout.addWidget(snap_button, alignment=Qt.AlignmentFlag.AlignCenter)
        return page

    def _build_text_page(self) -> QWidget:
        self.text_input = QTextEdit()
        self.text_input.setPlaceholderText("Enter your text content...")
        self.text_input.textChanged.connect(
            lambda: self.session.set_text(self.text_input.toPlainText())
        )
        return self.text_input

    # Prompt list
    def populate_prompts(self):
        """Rebuild the report-type combo from the prompt library"""
        prompts = self.session.prompts
        self.prompt_combo.blockSignals(True)
        self.prompt_combo.clear()
        last_group = None
        for group, value, label in prompts.options():
            if group != last_group:
                if last_group is not None:
                    self.prompt_combo.insertSeparator(self.prompt_combo.count())
                last_group = group
            self.prompt_combo.addItem(label, value)
        position = self.prompt_combo.findData(self.session.selected_prompt_key)
        self.prompt_combo.setCurrentIndex(max(position, 0))
        self.prompt_combo.blockSignals(False)

    def _on_prompt_selected(self, position: int):
        value = self.prompt_combo.itemData(position)
        if value:
            self.session.select_prompt(value)

    def _populate_imported(self):
        imported = self.session.prompts.imported
        self.imported_combo.clear()
        self.imported_combo.addItem("Select a prompt...", None)
        for name, content in imported.items():
            self.imported_combo.addItem(name, content)
        self.imported_row.setVisible(bool(imported))

    def _on_imported_selected(self, position: int):
        content = self.imported_combo.itemData(position)
        if content:
            self.freeform_input.setPlainText(content)

    def _dismiss_imported(self):
        self.session.prompts.clear_imported()
        self.freeform_input.clear()
        self._populate_imported()

    def _load_sheet(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load prompts", "", "Spreadsheets (*.xlsx *.xls)")
        if path:
            self.spawn(self._import_sheet(path))

    async def _import_sheet(self, path: str):
        await self.session.prompts.import_sheet(path)
        self._populate_imported()
        self.notice.show_notice("Excel prompts loaded!")

    def _save_prompt(self):
        content = self.freeform_input.toPlainText()
        if not content.strip():
            return
        name, accepted = QInputDialog.getText(self, "Save Custom Prompt", "Prompt name:")
        if accepted and name.strip():
            self.spawn(self._store_prompt(name, content))

    async def _store_prompt(self, name: str, content: str):
        selected = await self.session.prompts.save(name, content)
        self.session.select_prompt(selected)
        self.populate_prompts()
        self.notice.show_notice("Prompt saved successfully")

    # Input handlers
    def _on_mode_clicked(self, position: int):
        mode = MODES[position][0]
        self.session.set_mode(mode)
        self.input_stack.setCurrentIndex(position)
        if mode != CaptureMode.WEBCAM:
            self.camera.release()

    def _on_freeform_changed(self):
        self.session.set_freeform_prompt(self.freeform_input.toPlainText())

    def _on_merge_toggled(self, checked: bool):
        self.session.merge_pages = checked

    def _select_files(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "Select files", "", "Images and PDFs (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.pdf)")
        if paths:
            self._add_files(paths)

    def _select_folder(self):
        directory = QFileDialog.getExistingDirectory(self, "Select folder")
        if directory:
            paths = sorted(str(p) for p in Path(directory).iterdir() if p.is_file())
            self._add_files(paths)

    def _add_files(self, paths: List[str]):
        self.spawn(self._stage_files(paths), "Error reading files")

    async def _stage_files(self, paths: List[str]):
        summary = await self.session.add_files(paths)
        self.notice.show_notice(summary.message, error=summary.is_error)

    def _snap(self):
        self.spawn(self._capture_frame(), "Camera error")

    async def _capture_frame(self):
        frame = await self.camera.snap_async()
        if frame is None:
            self.notice.show_notice("Camera not available", error=True)
            return
        self.session.add_captured_frame(frame)
        self.camera_preview.setPixmap(pixmap_from_data_url(frame).scaled(
            self.camera_preview.width(), self.camera_preview.height(),
            Qt.AspectRatioMode.KeepAspectRatio,
        ))

    # Submission
    def _run_analysis(self):
        if self.session.can_submit:
            self.spawn(self._submit())

    async def _submit(self):
        note = await self.session.submit(self.folder_provider())
        if note is None:
            return
        self.text_input.blockSignals(True)
        self.text_input.clear()
        self.text_input.blockSignals(False)
        self.freeform_input.blockSignals(True)
        self.freeform_input.clear()
        self.freeform_input.blockSignals(False)
        self.success_row.show()
        self.run_button.hide()
        self.success_timer.start(self.settings.ui.success_duration_ms)

    def _hide_success(self):
        self.success_row.hide()
        self.run_button.show()
        self.session.acknowledge()

    def _refresh_state(self):
        """Sync widgets with the session"""
        session = self.session
        submitting = session.status == SessionStatus.SUBMITTING
        self.run_button.setEnabled(session.can_submit)
        self.run_button.setText("Processing..." if submitting else "RUN ANALYSIS")

        self.merge_checkbox.blockSignals(True)
        self.merge_checkbox.setChecked(session.merge_pages)
        self.merge_checkbox.blockSignals(False)
        self.save_prompt_button.setEnabled(bool(session.freeform_prompt.strip()))

        self._render_pages()

    def _render_pages(self):
        while self.pages_layout.count():
            item = self.pages_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        pages = self.session.pages.pages
        for position, page in enumerate(pages):
            thumb = PageThumb(page, position)
            thumb.remove_requested.connect(self.session.remove_page)
            self.pages_layout.addWidget(thumb)
        count = len(pages)
        self.pages_label.setText(f"{count} item{'s' if count > 1 else ''} ready")
        self.pages_label.setVisible(count > 0)
        self.pages_scroll.setVisible(count > 0)

    def closeEvent(self, event):
        self.camera.release()
        super().closeEvent(event)
