from enum import Enum


class SubmissionKind(Enum):
    ORDER = "ORDER"                      # Sale order + confirmation
    DIRECT_INVOICE = "DIRECT_INVOICE"    # Invoice without address/warehouse/tax breakdown
