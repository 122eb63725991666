"""Compliant constructs shared by accelerator stacks."""

from .secure_vpc import (
    InternetGatewayNotDefinedError,
    SecureNatGateway,
    SecureRouteTable,
    SecureSubnet,
    SecureVpc,
)

__all__ = [
    "InternetGatewayNotDefinedError",
    "SecureNatGateway",
    "SecureRouteTable",
    "SecureSubnet",
    "SecureVpc",
]
