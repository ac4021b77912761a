def normalize(label) -> str:
    """
    Comparison key for detector labels and catalog names.

    Trimmed, then folded through upper case so that a string and its
    upper-cased form always share a key. Anything that is not a string
    maps to "", which never equals a catalog key.
    """
    if not isinstance(label, str):
        return ""
    return label.strip().upper().casefold()
