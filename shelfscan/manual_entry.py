"""Manual product entry: the fallback when a product can't be identified."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from .shelf_life import DateParseError, days_until, parse_expiry_date, status_label

if TYPE_CHECKING:
    from .db.inventory import InventoryStore

logger = logging.getLogger(__name__)

MANUAL_ENTRY_BARCODE = "Manual Entry"
DEFAULT_CATEGORY = "General"
MANUAL_CONFIDENCE = 1.0


@dataclass
class ManualEntryForm:
    """The four text fields of the entry form, plus its busy flag.

    ``barcode`` starts out as ``initial_barcode``, e.g. the code of a scan
    that could not be identified.
    """

    initial_barcode: str = ""
    product_name: str = ""
    category: str = ""
    barcode: str = ""
    expiry_date: str = ""
    saving: bool = False

    def __post_init__(self) -> None:
        if not self.barcode:
            self.barcode = self.initial_barcode

    @property
    def editable(self) -> bool:
        return not self.saving

    def clear(self) -> None:
        self.product_name = ""
        self.category = ""
        self.barcode = self.initial_barcode
        self.expiry_date = ""


@dataclass(frozen=True)
class ManualEntryRecord:
    product_name: str
    expiry_date: date
    days_left: int
    status: str
    category: str = DEFAULT_CATEGORY
    barcode: str = MANUAL_ENTRY_BARCODE
    ai_confidence: float = MANUAL_CONFIDENCE

    @classmethod
    def from_form(cls, form: ManualEntryForm, now: datetime | None = None) -> ManualEntryRecord:
        """Validate the form's fields and derive days-left and status.

        Raises:
            ValueError: If the product name or expiry date is blank.
            DateParseError: If the expiry date is not a valid date.
        """
        name = form.product_name.strip()
        expiry_text = form.expiry_date.strip()
        if not name or not expiry_text:
            raise ValueError("Product name and expiry date are required")

        expiry = parse_expiry_date(expiry_text)
        if isinstance(expiry, datetime):
            expiry = expiry.date()
        days_left = days_until(expiry, now=now)

        return cls(
            product_name=name,
            expiry_date=expiry,
            days_left=days_left,
            status=status_label(days_left),
            category=form.category.strip() or DEFAULT_CATEGORY,
            barcode=form.barcode.strip() or MANUAL_ENTRY_BARCODE,
        )

    def to_inventory_item(self) -> dict:
        return {
            "barcode": self.barcode,
            "product_name": self.product_name,
            "category": self.category,
            "expiry_date": self.expiry_date.isoformat(),
            "ai_confidence": self.ai_confidence,
        }


class SubmissionStatus(str, Enum):
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_DATE = "INVALID_DATE"
    SAVE_FAILED = "SAVE_FAILED"
    SAVED = "SAVED"


class Continuation(str, Enum):
    OK = "OK"
    RETRY = "RETRY"
    CANCEL = "CANCEL"
    ADD_ANOTHER = "ADD_ANOTHER"
    VIEW_INVENTORY = "VIEW_INVENTORY"
    DONE = "DONE"


@dataclass
class SubmissionResult:
    status: SubmissionStatus
    title: str
    message: str
    options: tuple[Continuation, ...] = (Continuation.OK,)
    record: ManualEntryRecord | None = None
    error: Exception | None = field(default=None, repr=False)

    @property
    def saved(self) -> bool:
        return self.status is SubmissionStatus.SAVED


class ManualEntryFlow:
    """Drive a ``ManualEntryForm`` through validation and persistence.

    Navigation belongs to the UI, so it is passed in as callbacks.
    ``on_back`` closes the form; ``on_view_inventory`` opens the inventory
    list after the form has been closed.
    """

    def __init__(
        self,
        store: InventoryStore,
        form: ManualEntryForm | None = None,
        *,
        on_back: Callable[[], None] | None = None,
        on_view_inventory: Callable[[], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.form = form or ManualEntryForm()
        self._on_back = on_back
        self._on_view_inventory = on_view_inventory
        self._clock = clock

    def submit(self) -> SubmissionResult:
        """Validate, save, and report what the user can do next.

        Validation failures leave every field as typed. A failed save keeps
        the form populated for a retry. Only a successful save clears it.
        """
        form = self.form
        try:
            record = ManualEntryRecord.from_form(form, now=self._clock())
        except DateParseError as exc:
            return SubmissionResult(
                SubmissionStatus.INVALID_DATE,
                "Invalid Date",
                "Please enter a valid expiry date (YYYY-MM-DD format).",
                error=exc,
            )
        except ValueError as exc:
            return SubmissionResult(
                SubmissionStatus.MISSING_FIELDS,
                "Missing Information",
                "Please enter at least the product name and expiry date.",
                error=exc,
            )

        form.saving = True
        try:
            self.store.add_inventory_item(record.to_inventory_item())
        except Exception as exc:
            logger.error("Failed to save manual entry to inventory: %s", exc)
            return SubmissionResult(
                SubmissionStatus.SAVE_FAILED,
                "Error",
                "Failed to save product to inventory. Please try again.",
                options=(Continuation.RETRY, Continuation.CANCEL),
                record=record,
                error=exc,
            )
        finally:
            form.saving = False

        logger.info(
            "Manual entry saved: name=%s category=%s expiry=%s days_left=%d",
            record.product_name,
            record.category,
            record.expiry_date,
            record.days_left,
        )
        form.clear()
        return SubmissionResult(
            SubmissionStatus.SAVED,
            "Success",
            "Product saved to inventory!",
            options=(
                Continuation.ADD_ANOTHER,
                Continuation.VIEW_INVENTORY,
                Continuation.DONE,
            ),
            record=record,
        )

    def choose(self, option: Continuation) -> None:
        """Carry out the continuation the user picked after a submission."""
        match option:
            case Continuation.OK | Continuation.RETRY | Continuation.ADD_ANOTHER:
                self.form.saving = False
            case Continuation.VIEW_INVENTORY:
                self._back()
                if self._on_view_inventory is not None:
                    self._on_view_inventory()
            case Continuation.DONE | Continuation.CANCEL:
                self._back()

    def _back(self) -> None:
        if self._on_back is not None:
            self._on_back()
