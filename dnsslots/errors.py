class DNSSlotsError(Exception):
    pass


class SlotsFileError(DNSSlotsError):
    """The slots file could not be read or does not describe a catalog."""


class SlotInvariantError(DNSSlotsError):
    """A matched slot vanished from the catalog while spinning.

    Matches are derived from the catalog itself, so this only happens when
    the engine is broken. Never recovered from.
    """
