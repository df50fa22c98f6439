"""Row-level failure codes reported by the CSV import pipeline."""


class RowErrorCode:
    MISSING_FIELDS = "MissingFields"
    INVALID_CLIENT_ID = "InvalidClientId"
    INVALID_TAG_ID = "InvalidTagId"
    INVALID_CHANNEL = "InvalidChannel"
    INVALID_SPENDS_TARGET = "InvalidSpendsTarget"
    INVALID_TAG_HEADER = "InvalidTagHeader"
    INVALID_MONTH = "InvalidMonth"
    INVALID_ACCOUNT_NAME = "InvalidAccountName"
    TAG_NOT_FOUND = "TagNotFound"
    TAG_NAME_MISMATCH = "TagNameMismatch"
    TAG_HEADER_MISMATCH = "TagHeaderMismatch"
    DUPLICATE_IN_CSV = "DuplicateInCsv"
    ALREADY_EXISTS = "AlreadyExists"
    DATA_PROCESSING_ERROR = "DataProcessingError"
    STORE_UNAVAILABLE = "StoreUnavailable"


class RowWarningCode:
    UNIQUENESS_CHECK_SKIPPED = "UniquenessCheckSkipped"
