from __future__ import annotations


class CatalogImportError(Exception):
    """An import-time condition that aborts the whole import.

    The catalog is never modified when one of these is raised.
    """


class MalformedCsv(CatalogImportError):
    pass


class MalformedHeader(CatalogImportError):
    def __init__(self, message: str, accepted: list[list[str]]):
        super().__init__(message)
        self.accepted = accepted


class EmptyImport(CatalogImportError):
    pass
