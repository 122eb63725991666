"""Exceptions raised while assembling accelerator stacks."""


class ConfigurationError(ValueError):
    """A configuration reference could not be resolved during synthesis.

    Raised when a named reference (route table, subnet, NAT gateway, transit
    gateway, transit gateway attachment, account or query log configuration)
    is not declared where the stack expects it. Synthesis is aborted; nothing
    has been deployed at this point.
    """
