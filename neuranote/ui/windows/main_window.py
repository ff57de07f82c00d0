"""
Main window - sidebar next to the capture and records tabs
"""

from PyQt6.QtWidgets import QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QTabWidget, QLabel

from ...config.settings import Settings
from ...models.records import UserProfile
from ...services.events import EventBus, NAVIGATE
from .capture_tab import CaptureTab
from .records_tab import RecordsTab
from .sidebar import Sidebar

TAB_CAPTURE = "capture"
TAB_RECORDS = "records"


class MainWindow(QMainWindow):
    """Top-level window; switches tabs on navigation events"""

    def __init__(self, settings: Settings, event_bus: EventBus, sidebar: Sidebar,
                 capture_tab: CaptureTab, records_tab: RecordsTab):
        super().__init__()
        self.settings = settings
        self.event_bus = event_bus
        self.sidebar = sidebar
        self.capture_tab = capture_tab
        self.records_tab = records_tab

        self.setWindowTitle("NeuraNote")
        self.resize(settings.windows.width, settings.windows.height)
        self._setup_ui()

        self.sidebar.folder_opened.connect(self._open_folder)
        self.capture_tab.view_records_requested.connect(lambda: self.navigate(TAB_RECORDS))
        self.records_tab.browser.index.add_listener(self._update_breadcrumb)
        self.event_bus.subscribe(NAVIGATE, self.navigate)
        self._update_breadcrumb()

    def _setup_ui(self):
        central = QWidget()
        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.sidebar)

        content = QVBoxLayout()
        self.breadcrumb = QLabel()
        self.breadcrumb.setStyleSheet("QLabel { padding: 8px 16px; color: gray; }")
        content.addWidget(self.breadcrumb)

        self.tabs = QTabWidget()
        self.tabs.addTab(self.capture_tab, "Capture")
        self.tabs.addTab(self.records_tab, "Records")
        self.tabs.currentChanged.connect(lambda _: self._update_breadcrumb())
        content.addWidget(self.tabs, 1)
        layout.addLayout(content, 1)

        self.setCentralWidget(central)

    def navigate(self, tab: str):
        self.tabs.setCurrentWidget(self.records_tab if tab == TAB_RECORDS else self.capture_tab)

    def _open_folder(self, folder_id):
        self.records_tab.open_folder(folder_id)
        self.navigate(TAB_RECORDS)

    def _update_breadcrumb(self):
        folder = self.records_tab.browser.active_folder
        section = "Records" if self.tabs.currentWidget() is self.records_tab else "Capture"
        self.breadcrumb.setText(f"{folder.name if folder else 'All Folders'}  /  {section}")

    def set_user(self, profile: UserProfile):
        self.sidebar.set_user(profile)

    def closeEvent(self, event):
        for panel in (self.sidebar, self.capture_tab, self.records_tab):
            panel.cancel_pending()
        self.capture_tab.camera.release()
        super().closeEvent(event)
