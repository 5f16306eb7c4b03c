"""
main.py

Situation Plan Editor - Main Application

PyQt6 application for laying out symbols of a one-line electrical diagram
and imported images on the pages of a situation plan:
- Drag boxes with the mouse, labels follow their box
- Send to back / bring to front
- Multiple pages, zoom, undo/redo

Usage:
    python main.py

Dependencies:
    pip install PyQt6 pillow platformdirs tomli_w

Environment:
    SITPLAN_DEBUG_TRACE=1 (optional trace output)
"""

from __future__ import annotations

import json
import sys
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFileDialog,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QSpinBox,
    QToolBar,
)

from canvas import PlanScene, PlanView, SituationPlanView
from context import EditorContext
from debug_trace import close_log, trace, trace_exception
from models import AdresType, ElementProperties, LabelAnchor, SituationPlan
from settings import SettingsManager, get_settings
from symbols import ElectroSchema, Ventilator
from undo_commands import CheckpointStore

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.svg)"


class ElementPropertiesDialog(QDialog):
    """Dialog for the schema id, label and transform of a box.

    Args:
        props: Initial values.
        with_id: Show the schema id field (symbols only).
    """

    def __init__(self, props: ElementProperties, with_id: bool = True, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Element properties")
        form = QFormLayout(self)

        self.id_edit = QLineEdit("" if props.electro_id is None else str(props.electro_id))
        self.adrestype_combo = QComboBox()
        for t in AdresType:
            self.adrestype_combo.addItem(t.value, t)
        self.adrestype_combo.setCurrentIndex(list(AdresType).index(props.adrestype))
        self.adres_edit = QLineEdit(props.adres)
        self.location_combo = QComboBox()
        for a in LabelAnchor:
            self.location_combo.addItem(a.value, a)
        self.location_combo.setCurrentIndex(list(LabelAnchor).index(props.adreslocation))

        self.fontsize_spin = QSpinBox()
        self.fontsize_spin.setRange(1, 200)
        self.fontsize_spin.setValue(props.labelfontsize or get_settings().settings.labels.default_font_size)
        self.scale_spin = QDoubleSpinBox()
        self.scale_spin.setRange(0.05, 20.0)
        self.scale_spin.setSingleStep(0.1)
        self.scale_spin.setValue(props.scale)
        self.rotate_spin = QDoubleSpinBox()
        self.rotate_spin.setRange(-360.0, 360.0)
        self.rotate_spin.setSingleStep(90.0)
        self.rotate_spin.setValue(props.rotate)

        if with_id:
            form.addRow(QLabel("Schema ID:"), self.id_edit)
            form.addRow(QLabel("Address:"), self.adrestype_combo)
            form.addRow(QLabel("Manual address:"), self.adres_edit)
        form.addRow(QLabel("Label position:"), self.location_combo)
        form.addRow(QLabel("Font size:"), self.fontsize_spin)
        form.addRow(QLabel("Scale:"), self.scale_spin)
        form.addRow(QLabel("Rotation:"), self.rotate_spin)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def values(self) -> ElementProperties:
        text = self.id_edit.text().strip()
        return ElementProperties(
            electro_id=int(text) if text.isdigit() else None,
            adrestype=self.adrestype_combo.currentData(),
            adres=self.adres_edit.text(),
            adreslocation=self.location_combo.currentData(),
            labelfontsize=self.fontsize_spin.value(),
            scale=self.scale_spin.value(),
            rotate=self.rotate_spin.value(),
        )


class MainWindow(QMainWindow):
    """Main application window for the situation plan editor.

    Args:
        settings_manager: The SettingsManager instance for application settings.
        schema: One-line diagram whose symbols can be placed.
    """

    def __init__(self, settings_manager: SettingsManager, schema: Optional[ElectroSchema] = None):
        super().__init__()
        self.settings_manager = settings_manager
        self.setWindowTitle("Situation Plan Editor")
        settings = settings_manager.settings

        self.plan = SituationPlan(schema)
        self.history = CheckpointStore(self.plan, settings.history.undo_limit)
        self.context = EditorContext(
            history=self.history,
            settings=settings,
            alert=self._alert,
            confirm=self._confirm,
        )

        self.scene = PlanScene(settings)
        self.view = PlanView(self.scene, self._on_drop_file)
        self.setCentralWidget(self.view)

        self.sitplan_view = SituationPlanView(self.scene, self.plan, self.context)
        self.sitplan_view.on_ribbon_update = self._update_ribbon
        self.history.on_restore = self.sitplan_view.rebuild
        self.view.on_wheel_zoom = self._on_wheel_zoom

        self._build_toolbar()
        self.sitplan_view.reconcile()

    # ---- toolbar ----

    def _add_action(self, tb: QToolBar, text: str, slot, shortcut=None) -> QAction:
        act = QAction(text, self)
        if shortcut is not None:
            act.setShortcut(shortcut)
        act.triggered.connect(slot)
        tb.addAction(act)
        return act

    def _build_toolbar(self):
        tb = QToolBar("Main")
        self.addToolBar(tb)

        self._add_action(tb, "Open Plan...", self.open_plan, QKeySequence.StandardKey.Open)
        self._add_action(tb, "Save Plan...", self.save_plan, QKeySequence.StandardKey.Save)
        tb.addSeparator()
        self._add_action(tb, "Add Symbol...", self.add_symbol)
        self._add_action(tb, "Add Image...", self.add_image)
        self.edit_act = self._add_action(tb, "Edit...", self.edit_selected, "E")
        self.delete_act = self._add_action(tb, "Delete", self.delete_selected, QKeySequence(Qt.Key.Key_Delete))
        self.back_act = self._add_action(tb, "Send to Back", self.sitplan_view.send_to_back)
        self.front_act = self._add_action(tb, "Bring to Front", self.sitplan_view.bring_to_front)
        tb.addSeparator()
        self.undo_act = self._add_action(tb, "Undo", self.history.undo, QKeySequence.StandardKey.Undo)
        self.redo_act = self._add_action(tb, "Redo", self.history.redo, QKeySequence.StandardKey.Redo)
        tb.addSeparator()
        step = self.context.settings.canvas.zoom.step
        self._add_action(tb, "Zoom In", lambda: self.sitplan_view.zoom_increment(step), QKeySequence.StandardKey.ZoomIn)
        self._add_action(tb, "Zoom Out", lambda: self.sitplan_view.zoom_increment(-step), QKeySequence.StandardKey.ZoomOut)
        self._add_action(tb, "Zoom Fit", self.sitplan_view.zoom_to_fit, "F")
        tb.addSeparator()

        self.page_combo = QComboBox()
        self.page_combo.activated.connect(self._on_page_activated)
        tb.addWidget(self.page_combo)
        self.add_page_act = self._add_action(tb, "Add Page", self.sitplan_view.add_page)
        self.delete_page_act = self._add_action(tb, "Delete Page", self.sitplan_view.delete_page)

    def _update_ribbon(self):
        state = self.sitplan_view.ribbon_state()
        self.undo_act.setEnabled(state["can_undo"])
        self.redo_act.setEnabled(state["can_redo"])
        self.add_page_act.setEnabled(state["can_add_page"])
        self.delete_page_act.setEnabled(state["can_delete_page"])

        self.page_combo.blockSignals(True)
        self.page_combo.clear()
        for page in range(1, state["num_pages"] + 1):
            self.page_combo.addItem(f"Page {page}", page)
        self.page_combo.setCurrentIndex(state["active_page"] - 1)
        self.page_combo.blockSignals(False)

    def _on_page_activated(self, index: int):
        page = self.page_combo.itemData(index)
        if page is not None and page != self.plan.active_page:
            self.sitplan_view.change_page(page)

    def _on_wheel_zoom(self, factor: float):
        z = self.context.settings.canvas.zoom
        self.sitplan_view.set_zoom(min(z.max, max(z.min, self.sitplan_view.zoomfactor * factor)))

    # ---- user prompts ----

    def _alert(self, message: str) -> None:
        QMessageBox.warning(self, "Situation plan", message)

    def _confirm(self, message: str) -> bool:
        answer = QMessageBox.question(self, "Situation plan", message)
        return answer == QMessageBox.StandardButton.Yes

    # ---- element commands ----

    def add_symbol(self):
        dlg = ElementPropertiesDialog(ElementProperties(), with_id=True, parent=self)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            self.sitplan_view.add_electro_item(dlg.values())

    def add_image(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Add image", str(self.settings_manager.get_workspace_dir()), IMAGE_FILTER)
        if path:
            self.sitplan_view.add_element_from_file(path)

    def _on_drop_file(self, path: str):
        self.sitplan_view.add_element_from_file(path)

    def edit_selected(self):
        element = self.sitplan_view.selected_element()
        if element is None:
            return
        props = ElementProperties(
            electro_id=element.electro_item_id,
            adrestype=element.adrestype,
            adres=element.adres,
            adreslocation=element.adreslocation,
            labelfontsize=element.labelfontsize,
            scale=element.get_scale(),
            rotate=element.rotate,
        )
        dlg = ElementPropertiesDialog(props, with_id=element.is_eendraadschema_symbool(), parent=self)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            values = dlg.values()
            if not element.is_eendraadschema_symbool():
                values.electro_id = None
            elif values.electro_id is None or self.plan.schema.get_item(values.electro_id) is None:
                self._alert("No valid ID entered!")
                return
            self.sitplan_view.edit_selected(values)

    def delete_selected(self):
        self.sitplan_view.delete_selected()

    # ---- project files ----

    def save_plan(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Save plan", str(self.settings_manager.get_workspace_dir()), "Situation plan (*.json)")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.plan.to_record(), f, indent=2)
        except OSError as e:
            QMessageBox.critical(self, "Save failed", str(e))

    def open_plan(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open plan", str(self.settings_manager.get_workspace_dir()), "Situation plan (*.json)")
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                rec = json.load(f)
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Open failed", str(e))
            return
        self.plan.load_record(rec)
        self.history.reset()
        self.sitplan_view.rebuild()


def demo_schema() -> ElectroSchema:
    """A small one-line diagram to place symbols from."""
    schema = ElectroSchema()
    for n in range(1, 4):
        schema.add_item(Ventilator(n, nr=f"V{n}"))
    return schema


def main():
    """Application entry point."""
    trace("Application starting", "MAIN")
    app = QApplication(sys.argv)

    trace("Loading settings", "MAIN")
    settings_manager = get_settings()
    settings_manager.ensure_file_complete()

    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager, demo_schema())
    w.resize(1400, 900)
    w.show()
    w.sitplan_view.zoom_to_fit()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
