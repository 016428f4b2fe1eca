# catalog/services/exceptions.py


class CatalogError(Exception):
    """Base catalog exception"""


class AssetPermissionError(CatalogError):
    pass
