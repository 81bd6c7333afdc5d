"""Exception hierarchy for htmlpath.

Only failures of collaborators (configuration, transport) are exceptions.
Malformed markup and failed lookups are ordinary outcomes and never raise.
"""


class HTMLPathError(Exception):
    """Base class for all htmlpath errors."""
