import html
import logging
import sys
import threading
from typing import Optional

from PyQt5 import QtCore, QtGui, QtWidgets
from qt_material import apply_stylesheet

from activity_schema import HistoryEntry
from api_models import SUPPORTED_MODELS, api_name_to_colloquial
from constants import LOG_LEVEL, MAX_UPLOAD_MB
from errors import ConfigurationError, InvalidInput
from extractor import ExtractionClient
from image_io import EncodedImage, load_image
from scanner import ScanService
from session import View
from session_store import SessionStore
from settings_store import THEMES, load_settings, save_settings

logger = logging.getLogger(__name__)


class SignalBus(QtCore.QObject):
    scan_finished = QtCore.pyqtSignal(object)
    state = QtCore.pyqtSignal(str)


class FitSnapWindow(QtWidgets.QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("FitSnap AI")
        self.setMinimumSize(960, 640)

        self.settings = load_settings()
        self.store = SessionStore()
        self.scanner: Optional[ScanService] = None

        self.bus = SignalBus()
        self.bus.scan_finished.connect(self._handle_scan_finished)
        self.bus.state.connect(self._update_status)

        self._build_layout()
        self._render()

    # UI ------------------------------------------------------------------

    def _build_layout(self) -> None:
        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(16)

        header_layout = QtWidgets.QHBoxLayout()
        title = QtWidgets.QLabel("FitSnap AI")
        title.setFont(QtGui.QFont("Inter", 28, QtGui.QFont.Bold))
        self.count_label = QtWidgets.QLabel()
        self.count_label.setStyleSheet("color: #9fbccf;")

        title_block = QtWidgets.QVBoxLayout()
        title_block.addWidget(title)
        title_block.addWidget(self.count_label)
        header_layout.addLayout(title_block)
        header_layout.addStretch()

        self.settings_btn = QtWidgets.QPushButton("Settings")
        self.settings_btn.clicked.connect(self._open_settings_dialog)
        header_layout.addWidget(self.settings_btn)

        self.status_chip = QtWidgets.QLabel("Idle")
        self.status_chip.setAlignment(QtCore.Qt.AlignCenter)
        self.status_chip.setFixedWidth(120)
        self.status_chip.setStyleSheet("border-radius: 16px; padding: 8px 12px; background-color: #4a5568; color: white;")
        header_layout.addWidget(self.status_chip)

        layout.addLayout(header_layout)

        self.tab_widget = QtWidgets.QTabWidget()
        self.tab_widget.addTab(self._build_upload_tab(), "Analyze")
        self.tab_widget.addTab(self._build_history_tab(), "History")
        self.tab_widget.currentChanged.connect(self._handle_tab_change)
        layout.addWidget(self.tab_widget)

        central.setLayout(layout)
        self.setCentralWidget(central)

    def _build_upload_tab(self) -> QtWidgets.QWidget:
        widget = QtWidgets.QWidget()
        layout = QtWidgets.QHBoxLayout(widget)
        layout.setSpacing(16)
        layout.setContentsMargins(0, 0, 0, 0)

        left = QtWidgets.QVBoxLayout()
        intro = QtWidgets.QLabel("Extract data from Apple Health, Strava, Garmin, or Google Fit screenshots.")
        intro.setWordWrap(True)
        left.addWidget(intro)

        self.preview_label = QtWidgets.QLabel(f"PNG, JPG or WEBP up to {MAX_UPLOAD_MB:g}MB")
        self.preview_label.setAlignment(QtCore.Qt.AlignCenter)
        self.preview_label.setMinimumSize(360, 360)
        self.preview_label.setStyleSheet("border: 2px dashed #4a5568; border-radius: 16px;")
        left.addWidget(self.preview_label, 1)

        self.upload_btn = QtWidgets.QPushButton("Upload Screenshot")
        self.upload_btn.setMinimumHeight(48)
        self.upload_btn.clicked.connect(self._choose_screenshot)
        left.addWidget(self.upload_btn)

        self.error_label = QtWidgets.QLabel()
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #f87171;")
        left.addWidget(self.error_label)
        layout.addLayout(left, 1)

        self.result_view = QtWidgets.QTextBrowser()
        layout.addWidget(self.result_view, 1)
        return widget

    def _build_history_tab(self) -> QtWidgets.QWidget:
        widget = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(widget)
        layout.setSpacing(16)
        layout.setContentsMargins(0, 0, 0, 0)

        header = QtWidgets.QHBoxLayout()
        label = QtWidgets.QLabel("Scan History")
        label.setFont(QtGui.QFont("Inter", 14, QtGui.QFont.Bold))
        header.addWidget(label)
        header.addStretch()
        new_scan_btn = QtWidgets.QPushButton("＋ New Scan")
        new_scan_btn.clicked.connect(lambda: self._show_view(View.UPLOAD))
        header.addWidget(new_scan_btn)
        layout.addLayout(header)

        self.history_table = QtWidgets.QTableWidget(0, 6)
        self.history_table.setHorizontalHeaderLabels(["Date", "Activity", "Value", "Summary", "", ""])
        self.history_table.horizontalHeader().setSectionResizeMode(QtWidgets.QHeaderView.ResizeToContents)
        self.history_table.horizontalHeader().setSectionResizeMode(3, QtWidgets.QHeaderView.Stretch)
        self.history_table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        layout.addWidget(self.history_table)
        return widget

    # Actions -------------------------------------------------------------

    def _choose_screenshot(self) -> None:
        if self.store.busy:
            return

        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Select screenshot", "", "Images (*.png *.jpg *.jpeg *.webp)"
        )
        if not path:
            return

        try:
            image = load_image(path)
            scanner = self._ensure_scanner()
        except (InvalidInput, ConfigurationError) as exc:
            self.error_label.setText(str(exc))
            if isinstance(exc, ConfigurationError):
                QtWidgets.QMessageBox.critical(self, "Configuration Error", str(exc))
            return

        self._set_preview(image)
        self.error_label.clear()
        self.upload_btn.setEnabled(False)
        self.bus.state.emit("Analyzing")
        thread = threading.Thread(target=self._run_scan, args=(scanner, image), daemon=True)
        thread.start()

    def _run_scan(self, scanner: ScanService, image: EncodedImage) -> None:
        entry = scanner.submit(image)
        self.bus.scan_finished.emit(entry)
        self.bus.state.emit("Idle")

    def _ensure_scanner(self) -> ScanService:
        if self.scanner is None:
            client = ExtractionClient(model_name=self.settings.get("model_name"))
            self.scanner = ScanService(self.store, client)
        return self.scanner

    def _delete_entry(self, entry_id: str) -> None:
        self.store.delete_entry(entry_id)
        self._render()

    def _show_details(self, entry_id: str) -> None:
        if self.store.show_entry(entry_id):
            self._render()

    def _show_view(self, view: View) -> None:
        self.store.set_view(view)
        self._render()

    def _handle_tab_change(self, index: int) -> None:
        view = View.UPLOAD if index == 0 else View.HISTORY
        if self.store.active_view != view:
            self.store.set_view(view)

    def _open_settings_dialog(self) -> None:
        dialog = SettingsDialog(self.settings, self)
        if dialog.exec_() != QtWidgets.QDialog.Accepted:
            return
        self.settings = {**self.settings, **dialog.values()}
        save_settings(self.settings)
        apply_stylesheet(QtWidgets.QApplication.instance(), theme=self.settings["theme"])
        if not self.store.busy:
            self.scanner = None

    # Callbacks -----------------------------------------------------------

    def _handle_scan_finished(self, entry: Optional[HistoryEntry]) -> None:
        self.upload_btn.setEnabled(True)
        self._render()

    def _update_status(self, state: str) -> None:
        color = "#6366f1" if state == "Analyzing" else "#4a5568"
        self.status_chip.setText(state)
        self.status_chip.setStyleSheet(f"border-radius: 16px; padding: 8px 12px; background-color: {color}; color: white;")

    def _render(self) -> None:
        self.count_label.setText(f"{self.store.count()} snapshots scanned")
        self.error_label.setText(self.store.last_error or "")
        self.upload_btn.setEnabled(not self.store.busy)
        if self.store.selected_image:
            self._set_preview(self.store.selected_image)
        self._render_latest(self.store.latest())
        self._render_history()

        self.tab_widget.blockSignals(True)
        self.tab_widget.setCurrentIndex(0 if self.store.active_view == View.UPLOAD else 1)
        self.tab_widget.blockSignals(False)

    def _render_latest(self, entry: Optional[HistoryEntry]) -> None:
        if entry is None:
            self.result_view.setHtml(
                "<h3>Ready to Scan</h3><p>Upload a screenshot to see detailed analytics and AI insights here.</p>"
            )
            return

        data = entry.to_ui_dict()
        stats = "".join(
            f"<tr><td>{html.escape(label)}</td><td><b>{html.escape(value)}</b></td></tr>"
            for label, value in data["stats"]
        )
        self.result_view.setHtml(
            f"<h3 style='color: {data['color']}'>Latest Extraction</h3>"
            f"<p style='font-size: 40px'><b>{data['primary_value']}</b> {html.escape(data['unit'])}</p>"
            f"<p>Activity: <b>{data['activity']}</b> &nbsp; AI Confidence: <b>{data['confidence']}</b></p>"
            f"<table width='100%'>{stats}</table>"
            f"<p><i>{html.escape(data['summary'])}</i></p>"
        )

    def _render_history(self) -> None:
        entries = self.store.entries()
        self.history_table.setRowCount(len(entries))
        for row, entry in enumerate(entries):
            data = entry.to_ui_dict()
            activity_item = QtWidgets.QTableWidgetItem(data["activity"])
            activity_item.setForeground(QtGui.QColor(data["color"]))
            self.history_table.setItem(row, 0, QtWidgets.QTableWidgetItem(data["date"]))
            self.history_table.setItem(row, 1, activity_item)
            self.history_table.setItem(row, 2, QtWidgets.QTableWidgetItem(f"{data['primary_value']} {data['unit']}"))
            self.history_table.setItem(row, 3, QtWidgets.QTableWidgetItem(data["summary"]))

            details_btn = QtWidgets.QPushButton("Details")
            details_btn.clicked.connect(lambda _=False, entry_id=entry.id: self._show_details(entry_id))
            self.history_table.setCellWidget(row, 4, details_btn)

            delete_btn = QtWidgets.QPushButton("🗑")
            delete_btn.setToolTip("Delete scan")
            delete_btn.clicked.connect(lambda _=False, entry_id=entry.id: self._delete_entry(entry_id))
            self.history_table.setCellWidget(row, 5, delete_btn)

    def _set_preview(self, image: EncodedImage) -> None:
        pixmap = QtGui.QPixmap()
        if not pixmap.loadFromData(image.data):
            return
        self.preview_label.setPixmap(
            pixmap.scaled(self.preview_label.size(), QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation)
        )


class SettingsDialog(QtWidgets.QDialog):
    def __init__(self, settings: dict, parent=None):
        super().__init__(parent)
        self.setWindowTitle("FitSnap Settings")
        self.setModal(True)

        layout = QtWidgets.QFormLayout(self)
        self.model_combo = QtWidgets.QComboBox()
        for name in sorted(SUPPORTED_MODELS):
            self.model_combo.addItem(api_name_to_colloquial.get(name, name), name)
        index = self.model_combo.findData(settings.get("model_name"))
        self.model_combo.setCurrentIndex(max(index, 0))
        layout.addRow("Gemini Model", self.model_combo)

        self.theme_combo = QtWidgets.QComboBox()
        for theme in THEMES:
            self.theme_combo.addItem(theme.replace(".xml", "").replace("_", " ").title(), theme)
        self.theme_combo.setCurrentIndex(max(self.theme_combo.findData(settings.get("theme")), 0))
        layout.addRow("Theme", self.theme_combo)

        buttons = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def values(self) -> dict:
        return {
            "model_name": self.model_combo.currentData(),
            "theme": self.theme_combo.currentData(),
        }


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QtWidgets.QApplication(sys.argv)
    apply_stylesheet(app, theme=load_settings().get("theme", "dark_teal.xml"))
    window = FitSnapWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
