import sys
from typing import TYPE_CHECKING, Sequence

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QApplication,
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
)

from ..review.base import DIALOG_TITLE, REVIEW_PROMPT, BaseReviewer, ReviewResult

if TYPE_CHECKING:
    from ..managers.delete_manager import SelectionItem


class ReviewDialog(QDialog):
    """Modal checklist of the elements about to be deleted."""

    def __init__(self, items: "Sequence[SelectionItem]", require_code: bool, parent=None):
        super().__init__(parent)
        self.setWindowTitle(DIALOG_TITLE)
        self.setModal(True)
        self.resize(520, 440 if require_code else 400)
        self._items = list(items)
        self.code_edit: QLineEdit | None = None
        self._build_ui(require_code)

    def _build_ui(self, require_code: bool):
        layout = QVBoxLayout()
        self.setLayout(layout)

        layout.addWidget(QLabel(REVIEW_PROMPT))

        self.item_list = QListWidget()
        for item in self._items:
            row = QListWidgetItem(item.display_label)
            row.setFlags(row.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            row.setCheckState(Qt.CheckState.Checked)
            self.item_list.addItem(row)
        layout.addWidget(self.item_list)

        if require_code:
            code_row = QHBoxLayout()
            code_row.addWidget(QLabel("Code:"))
            self.code_edit = QLineEdit()
            self.code_edit.setEchoMode(QLineEdit.EchoMode.Password)
            code_row.addWidget(self.code_edit)
            code_row.addStretch()
            layout.addLayout(code_row)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def set_checked(self, row: int, checked: bool) -> None:
        state = Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked
        self.item_list.item(row).setCheckState(state)

    def checked_identities(self) -> frozenset:
        return frozenset(
            item.identity
            for row, item in enumerate(self._items)
            if self.item_list.item(row).checkState() == Qt.CheckState.Checked
        )

    def code(self) -> str | None:
        return self.code_edit.text() if self.code_edit is not None else None

    def result_for(self, accepted: bool) -> ReviewResult:
        if not accepted:
            return ReviewResult.cancelled()
        return ReviewResult(confirmed=True, checked_identities=self.checked_identities(), submitted_code=self.code())


class QtReviewer(BaseReviewer):
    """Presents the review as a PyQt6 dialog, creating a QApplication if needed."""

    def __init__(self, parent=None):
        self.parent = parent

    def present_review(self, items: "Sequence[SelectionItem]", prompt_for_code: bool) -> ReviewResult:
        app = QApplication.instance() or QApplication(sys.argv)  # noqa: F841
        dlg = ReviewDialog(items, prompt_for_code, parent=self.parent)
        accepted = dlg.exec() == QDialog.DialogCode.Accepted
        return dlg.result_for(accepted)
