class MatStudioError(Exception):
    """Base class for failures at an I/O boundary (files, storage, export)."""


class ProjectFileError(MatStudioError):
    pass


class ExportError(MatStudioError):
    pass
