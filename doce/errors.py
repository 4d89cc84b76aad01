"""Exception hierarchy for Doce.AI collaborators."""


class DoceError(Exception):
    """Base class for every error raised by Doce.AI code."""


class SiteUnreachableError(DoceError):
    """A catalog site could not be fetched or parsed."""

    def __init__(self, site: str, manual_url: str, reason: str = ""):
        self.site = site
        self.manual_url = manual_url
        self.reason = reason
        super().__init__(
            f"Não consegui acessar o site {site} automaticamente. "
            f"Você pode buscar manualmente em: {manual_url}"
        )


class SiteNotConfiguredError(DoceError):
    """The requested catalog site is not in the site table."""


class SheetsNotConfiguredError(DoceError):
    """Google Sheets credentials are missing."""


class InvalidSpreadsheetLinkError(DoceError):
    """A spreadsheet link did not contain a spreadsheet id."""


class QuoteServiceError(DoceError):
    """The Local Orçamentos API rejected or failed a request."""


class InvalidDatabaseError(DoceError):
    """Imported data does not look like a Doce.AI database."""


class RemoteClassificationError(DoceError):
    """Remote intent classification failed; always handled by local fallback."""
