from pydantic import BaseModel

from enums.submission_error_kind import SubmissionErrorKind
from enums.submission_kind import SubmissionKind
from enums.submission_state import SubmissionState
from enums.submission_warning import SubmissionWarning
from models.invoice import InvoicePayloadDTO
from models.order import OrderPayloadDTO


class SubmissionErrorDTO(BaseModel):
    kind: SubmissionErrorKind
    message: str
    missing_fields: list[str] = []
    server_message: str | None = None


class SubmissionResultDTO(BaseModel):
    """Terminal outcome of one place_order()/direct_invoice() call."""
    kind: SubmissionKind
    state: SubmissionState
    customer_id: int | str | None = None
    order_id: int | str | None = None
    invoice_id: int | str | None = None
    error: SubmissionErrorDTO | None = None
    warnings: list[SubmissionWarning] = []
    payload: OrderPayloadDTO | InvoicePayloadDTO | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED
