class StructuralError(ValueError):
    """
    The grid does not have the shape of a store stock export (missing header
    rows, no SKU column or no store blocks). Fatal for the whole run.
    """
