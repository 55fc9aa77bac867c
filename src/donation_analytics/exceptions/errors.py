class DonationAnalyticsError(Exception):
    """Base exception for donation_analytics."""

class DataIngestionError(DonationAnalyticsError):
    pass

class SchemaValidationError(DonationAnalyticsError):
    pass

class DataIntegrityError(DonationAnalyticsError):
    """Raised at load time when rows violate dataset invariants."""

class QueryExecutionError(DonationAnalyticsError):
    pass

class ExportError(DonationAnalyticsError):
    pass
