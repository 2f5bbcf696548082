"""Member simulator."""

from .sim import DEFAULT_MEMBERS, ISim, Sim, VirtualMember

__all__ = ["DEFAULT_MEMBERS", "ISim", "Sim", "VirtualMember"]
