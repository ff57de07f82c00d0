"""
Notice label - fading, self-dismissing status line for success and error messages
"""

from PyQt6.QtWidgets import QLabel, QGraphicsOpacityEffect
from PyQt6.QtCore import Qt, QPropertyAnimation, QEasingCurve, QTimer

SUCCESS_STYLE = """
    QLabel {
        background-color: #22C55E;
        color: white;
        border-radius: 14px;
        padding: 6px 14px;
        font-size: 13px;
        font-weight: 500;
    }
"""

ERROR_STYLE = """
    QLabel {
        background-color: #EF4444;
        color: white;
        border-radius: 14px;
        padding: 6px 14px;
        font-size: 13px;
        font-weight: 500;
    }
"""


class NoticeLabel(QLabel):
    """Dismissible notice that fades in and hides itself after a delay"""

    def __init__(self, duration_ms: int = 3000, fade_duration: int = 250):
        super().__init__()
        self.duration_ms = duration_ms
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setWordWrap(True)
        self.hide()

        self.opacity_effect = QGraphicsOpacityEffect()
        self.opacity_effect.setOpacity(0.0)
        self.setGraphicsEffect(self.opacity_effect)

        self.fade_animation = QPropertyAnimation(self.opacity_effect, b"opacity")
        self.fade_animation.setDuration(fade_duration)
        self.fade_animation.setStartValue(0.0)
        self.fade_animation.setEndValue(1.0)
        self.fade_animation.setEasingCurve(QEasingCurve.Type.OutQuart)

        self.hide_timer = QTimer(self)
        self.hide_timer.setSingleShot(True)
        self.hide_timer.timeout.connect(self.dismiss)

    def show_notice(self, text: str, error: bool = False):
        self.setText(text)
        self.setStyleSheet(ERROR_STYLE if error else SUCCESS_STYLE)
        self.show()
        self.fade_animation.stop()
        self.fade_animation.start()
        self.hide_timer.start(self.duration_ms)

    def dismiss(self):
        self.hide_timer.stop()
        self.hide()

    def mousePressEvent(self, event):
        """Click to dismiss"""
        self.dismiss()
        super().mousePressEvent(event)
