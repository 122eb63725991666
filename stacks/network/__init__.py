"""Network infrastructure module for accelerator deployments.

This module provides the VPC stack and the network constructs it assembles:
transit gateway attachments, transit gateway id resolution and default VPC
removal.
"""

from .network_vpc_stack import NetworkVpcStack

__all__ = ["NetworkVpcStack"]
