"""
Thumbnail of one staged page with a remove button
"""

import base64

from PyQt6.QtWidgets import QFrame, QLabel, QPushButton, QVBoxLayout
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QPixmap

from ...models.records import StagedPage


def pixmap_from_data_url(data_url: str) -> QPixmap:
    pixmap = QPixmap()
    header, _, payload = data_url.partition(',')
    if ';base64' in header:
        pixmap.loadFromData(base64.b64decode(payload))
    return pixmap


class PageThumb(QFrame):
    """Fixed-size preview of a staged page"""

    remove_requested = pyqtSignal(str)

    def __init__(self, page: StagedPage, index: int, height: int = 80):
        super().__init__()
        self.page_id = page.id
        self.setFixedSize(int(height * 3 / 4), height + 18)
        self.setStyleSheet("""
            QFrame {
                border: 1px solid rgba(128, 128, 128, 0.4);
                border-radius: 6px;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(2, 2, 2, 2)
        layout.setSpacing(2)

        preview = QLabel()
        preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        pixmap = pixmap_from_data_url(page.payload)
        if pixmap.isNull():
            # PDFs and other documents have no preview
            name = page.origin_file.filename if page.origin_file else "page"
            preview.setText(name)
            preview.setWordWrap(True)
        else:
            preview.setPixmap(pixmap.scaled(
                self.width() - 4, height - 4,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            ))
        layout.addWidget(preview, 1)

        footer = QPushButton(f"{index + 1}  ✕")
        footer.setToolTip("Remove page")
        footer.clicked.connect(lambda: self.remove_requested.emit(self.page_id))
        layout.addWidget(footer)
